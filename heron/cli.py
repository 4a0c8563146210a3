"""Heron CLI - Main Entry Point.

Commands:
    routes - Print the route table of an application
    serve  - Run an application with uvicorn
"""

import importlib
import logging
import sys
from typing import Any, Optional

import click

from . import __version__
from .app import Application
from .config import ConfigLoader, setup_logging
from .faults import Fault


def load_app(target: str) -> Application:
    """
    Import an application from ``module:attr``.

    ``attr`` may be an Application or a zero-argument factory returning one.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected MODULE:ATTR, got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import '{module_name}': {e}") from e

    obj: Any = getattr(module, attr, None)
    if obj is None:
        raise click.BadParameter(f"'{module_name}' has no attribute '{attr}'")
    if not isinstance(obj, Application) and callable(obj):
        obj = obj()
    if not isinstance(obj, Application):
        raise click.BadParameter(f"'{target}' is not a heron Application")
    return obj


# ============================================================================
# Commands
# ============================================================================

@click.group()
@click.version_option(version=__version__, prog_name="heron")
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Prototype registry and HTTP dispatch toolkit."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command('routes')
@click.argument('app')
def routes(app: str):
    """
    Print the route table of APP (MODULE:ATTR).

    Examples:
      heron routes myservice.main:app
    """
    sys.path.insert(0, ".")
    application = load_app(app)
    try:
        application.startup()
    except Fault as fault:
        click.secho(f"  Startup failed: {fault}", fg="red", err=True)
        sys.exit(1)

    rows = application.routes()
    if not rows:
        click.echo("  No routes registered")
        return

    width = max(len(row["path"]) for row in rows)
    for row in rows:
        extra = f"  (+{row['middlewares']} middleware)" if row["middlewares"] else ""
        click.echo(f"  {row['method']:<7} {row['path']:<{width}}  {row['name']}{extra}")


@cli.command('serve')
@click.argument('app')
@click.option('--host', default='127.0.0.1', help='Bind host')
@click.option('--port', default=8000, type=int, help='Bind port')
@click.option('--config', '-c', 'config_paths', multiple=True,
              type=click.Path(dir_okay=False),
              help='Config file (.yaml, .yml or .json); repeatable')
@click.option('--env-file', default=None, type=click.Path(dir_okay=False),
              help='.env file with HERON_* settings')
@click.option('--log-level', default=None,
              type=click.Choice(['debug', 'info', 'warning', 'error', 'critical']),
              help='Log level, overrides logging.level from config')
def serve(app: str, host: str, port: int, config_paths: tuple, env_file: Optional[str],
          log_level: Optional[str]):
    """
    Serve APP (MODULE:ATTR) with uvicorn.

    Logging is configured from the config files, the environment and
    --log-level, in increasing precedence.

    Examples:
      heron serve myservice.main:app --port 9000
      heron serve myservice.main:app -c config/base.yaml -c config/prod.yaml
    """
    import uvicorn

    sys.path.insert(0, ".")
    application = load_app(app)
    overrides = {"logging": {"level": log_level.upper()}} if log_level else None
    try:
        config = ConfigLoader.load(
            paths=list(config_paths), env_file=env_file, overrides=overrides,
        ).to_config()
    except Fault as fault:
        click.secho(f"  Invalid configuration: {fault}", fg="red", err=True)
        sys.exit(1)
    setup_logging(config)

    uvicorn.run(
        application,
        host=host,
        port=port,
        log_level=config.log_level.lower(),
    )


def main():
    """Entry point for `heron` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
