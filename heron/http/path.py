"""
Path template compiler.

Templates are absolute paths made of segments:
- static text, matched literally (``/users``)
- ``:name``, one path segment captured as ``name``
- ``:name?``, an optional segment
- ``:name(regex)``, a segment constrained by ``regex``

Compiled matchers are anchored; a trailing slash is tolerated unless
``strict`` is set. Matching is case sensitive by default.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern
import re

from ..faults import InvalidPathTemplateFault


_PARAM_SEGMENT = re.compile(r"^:(?P<name>[A-Za-z_]\w*)(?:\((?P<pattern>.+)\))?(?P<optional>\?)?$")
_DEFAULT_PATTERN = r"[^/]+?"


@dataclass(frozen=True)
class PathMatcher:
    """A compiled path template."""
    template: str
    regex: Pattern
    keys: List[str]

    def test(self, path: str) -> bool:
        return self.regex.match(path) is not None

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """
        Return the captured path variables, or None when ``path`` does not match.

        ``path`` is the already-decoded request path; values are returned as is.
        """
        m = self.regex.match(path)
        if m is None:
            return None
        return {
            key: value
            for key, value in m.groupdict().items()
            if value is not None
        }


def compile_path(template: str, case_sensitive: bool = True, strict: bool = False) -> PathMatcher:
    """Compile ``template`` into a PathMatcher."""
    if not template.startswith("/"):
        raise InvalidPathTemplateFault(template, "must start with '/'")

    parts: List[str] = []
    keys: List[str] = []
    segments = [seg for seg in template.split("/") if seg]

    for segment in segments:
        if not segment.startswith(":"):
            if ":" in segment:
                raise InvalidPathTemplateFault(template, f"parameter must span the whole segment: '{segment}'")
            parts.append("/" + re.escape(segment))
            continue

        m = _PARAM_SEGMENT.match(segment)
        if m is None:
            raise InvalidPathTemplateFault(template, f"malformed parameter segment '{segment}'")

        name = m.group("name")
        if name in keys:
            raise InvalidPathTemplateFault(template, f"duplicate parameter '{name}'")
        keys.append(name)

        pattern = m.group("pattern") or _DEFAULT_PATTERN
        try:
            re.compile(pattern)
        except re.error as e:
            raise InvalidPathTemplateFault(template, f"bad pattern for '{name}': {e}") from e

        capture = f"/(?P<{name}>{pattern})"
        parts.append(f"(?:{capture})?" if m.group("optional") else capture)

    if parts:
        body = "".join(parts) + ("" if strict else "/?")
    else:
        body = "/" if strict else "/?"

    flags = 0 if case_sensitive else re.IGNORECASE
    return PathMatcher(template=template, regex=re.compile(f"^{body}$", flags), keys=keys)
