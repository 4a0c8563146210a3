"""
Prototype metadata: qualifiers, prototype entries, the metadata side
table and the prototype registry.
"""

import pytest

from heron.faults import (
    AmbiguousPrototypeFault,
    AmbiguousRegistrationFault,
    DuplicatePrototypeFault,
    PrototypeNotFoundFault,
    RegistryFrozenFault,
)
from heron.metadata import (
    AccessLevel,
    InitType,
    InjectObject,
    LoadUnit,
    MetadataUtil,
    PrototypeEntry,
    PrototypeRegistry,
    QualifierInfo,
    default_proto_name,
    find_qualifier,
    matches_all,
    matches_one,
)


def q(**pairs):
    return QualifierInfo.from_mapping(pairs)


class UserService:
    pass


class MailService:
    pass


# ============================================================================
# Qualifier Matching
# ============================================================================

class TestQualifiers:

    def test_candidate_with_fewer_qualifiers_rejects_larger_request(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app", qualifiers=q(env="prod"))
        assert proto.verify_qualifiers(q(env="prod", region="us")) is False

    def test_exact_request_matches(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app", qualifiers=q(env="prod"))
        assert proto.verify_qualifiers(q(env="prod")) is True

    def test_empty_request_matches(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app", qualifiers=q(env="prod"))
        assert proto.verify_qualifiers(()) is True

    def test_value_mismatch(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app", qualifiers=q(env="prod"))
        assert proto.verify_qualifier(QualifierInfo("env", "dev")) is False
        assert proto.verify_qualifier(QualifierInfo("env", "prod")) is True

    def test_candidate_may_declare_extra_qualifiers(self):
        declared = q(env="prod", region="us")
        assert matches_all(declared, q(region="us")) is True

    def test_find_qualifier(self):
        declared = q(env="prod", region="us")
        assert find_qualifier(declared, "region") == QualifierInfo("region", "us")
        assert find_qualifier(declared, "zone") is None

    def test_repeated_attribute_uses_first_declaration(self):
        declared = (QualifierInfo("env", "prod"), QualifierInfo("env", "dev"))
        assert find_qualifier(declared, "env") == QualifierInfo("env", "prod")
        assert matches_one(declared, "env", "prod") is True
        assert matches_one(declared, "env", "dev") is False

    def test_unqualified_candidate_rejects_qualified_request(self):
        assert matches_all((), q(env="prod")) is False

    def test_values_are_case_sensitive(self):
        assert matches_one(q(env="prod"), "env", "Prod") is False
        assert matches_one(q(env="prod"), "Env", "prod") is False

    def test_str(self):
        assert str(QualifierInfo("env", "prod")) == "env=prod"


# ============================================================================
# Prototype Entries
# ============================================================================

class TestPrototypeEntry:

    def test_defaults(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app")
        assert proto.name == "userService"
        assert proto.init_type == InitType.CONTEXT
        assert proto.access_level == AccessLevel.PRIVATE
        assert proto.id == f"app:{UserService.__module__}.UserService"
        assert proto.filepath.endswith("test_metadata.py")

    def test_default_proto_name(self):
        assert default_proto_name(MailService) == "mailService"

    def test_construct_object_returns_fresh_instances(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app")
        first = proto.construct_object()
        second = proto.construct_object()
        assert isinstance(first, UserService)
        assert first is not second

    def test_construct_object_does_not_inject(self):
        proto = PrototypeEntry.create(
            UserService,
            load_unit_id="app",
            inject_objects=[InjectObject("mail", "mailService")],
        )
        assert not hasattr(proto.construct_object(), "mail")

    def test_get_metadata_absent(self):
        class Plain:
            pass

        proto = PrototypeEntry.create(Plain, load_unit_id="app")
        assert proto.get_metadata("missing") is None

    def test_get_metadata_present(self):
        class Tagged:
            pass

        MetadataUtil.define_metadata("tag", {"a": 1}, Tagged)
        proto = PrototypeEntry.create(Tagged, load_unit_id="app")
        assert proto.get_metadata("tag") == {"a": 1}

    def test_entry_is_immutable(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="app")
        with pytest.raises(Exception):
            proto.name = "other"


# ============================================================================
# Metadata Side Table
# ============================================================================

class TestMetadataUtil:

    def test_subclass_inherits_parent_metadata(self):
        class Base:
            pass

        class Child(Base):
            pass

        MetadataUtil.define_metadata("k", "base", Base)
        assert MetadataUtil.get_metadata("k", Child) == "base"
        assert MetadataUtil.get_own_metadata("k", Child) is None
        assert MetadataUtil.has_metadata("k", Child) is True

    def test_subclass_metadata_does_not_leak_to_parent(self):
        class Base:
            pass

        class Child(Base):
            pass

        MetadataUtil.define_metadata("k", "base", Base)
        MetadataUtil.define_metadata("k", "child", Child)
        assert MetadataUtil.get_metadata("k", Child) == "child"
        assert MetadataUtil.get_metadata("k", Base) == "base"

    def test_has_metadata_false(self):
        class Empty:
            pass

        assert MetadataUtil.has_metadata("k", Empty) is False


# ============================================================================
# Registry: Registration
# ============================================================================

class TestRegistryRegistration:

    def test_register_and_get(self, registry):
        proto = PrototypeEntry.create(UserService, load_unit_id="app")
        registry.register(proto)
        assert registry.get(proto.id) is proto
        assert proto.id in registry
        assert len(registry) == 1
        assert list(registry) == [proto]

    def test_duplicate_id_rejected(self, registry):
        registry.register(PrototypeEntry.create(UserService, load_unit_id="app"))
        with pytest.raises(DuplicatePrototypeFault):
            registry.register(PrototypeEntry.create(UserService, load_unit_id="app"))

    def test_same_name_same_qualifiers_rejected(self, registry):
        registry.register(PrototypeEntry.create(
            UserService, load_unit_id="app", name="svc", qualifiers=q(env="prod"), proto_id="a",
        ))
        with pytest.raises(AmbiguousRegistrationFault):
            registry.register(PrototypeEntry.create(
                MailService, load_unit_id="app", name="svc", qualifiers=q(env="prod"), proto_id="b",
            ))

    def test_same_name_different_qualifiers_allowed(self, registry):
        registry.register(PrototypeEntry.create(
            UserService, load_unit_id="app", name="svc", qualifiers=q(env="prod"), proto_id="a",
        ))
        registry.register(PrototypeEntry.create(
            MailService, load_unit_id="app", name="svc", qualifiers=q(env="dev"), proto_id="b",
        ))
        assert [p.id for p in registry.candidates("svc")] == ["a", "b"]

    def test_frozen_registry_rejects(self, registry):
        registry.freeze()
        assert registry.frozen is True
        with pytest.raises(RegistryFrozenFault):
            registry.register(PrototypeEntry.create(UserService, load_unit_id="app"))

    def test_register_load_unit(self, registry):
        unit = LoadUnit(
            id="users",
            name="users",
            prototypes=[PrototypeEntry.create(UserService, load_unit_id="users")],
        )
        registry.register_load_unit(unit)
        assert registry.get_load_unit("users") is unit
        assert len(registry) == 1

    def test_clashing_load_unit_leaves_registry_untouched(self, registry):
        unit = LoadUnit(
            id="users",
            name="users",
            prototypes=[
                PrototypeEntry.create(UserService, load_unit_id="users"),
                PrototypeEntry.create(UserService, load_unit_id="users"),
            ],
        )
        with pytest.raises(DuplicatePrototypeFault):
            registry.register_load_unit(unit)
        assert len(registry) == 0
        assert registry.get_load_unit("users") is None

    def test_load_unit_clashing_with_registered_proto(self, registry):
        registry.register(PrototypeEntry.create(
            UserService, load_unit_id="app", name="svc", qualifiers=q(env="prod"), proto_id="a",
        ))
        unit = LoadUnit(
            id="mail",
            name="mail",
            prototypes=[
                PrototypeEntry.create(MailService, load_unit_id="mail"),
                PrototypeEntry.create(
                    MailService, load_unit_id="mail", name="svc", qualifiers=q(env="prod"), proto_id="b",
                ),
            ],
        )
        with pytest.raises(AmbiguousRegistrationFault):
            registry.register_load_unit(unit)
        assert [p.id for p in registry] == ["a"]
        assert registry.get_load_unit("mail") is None

    def test_registry_faults_are_fatal(self, registry):
        registry.register(PrototypeEntry.create(UserService, load_unit_id="app"))
        with pytest.raises(DuplicatePrototypeFault) as exc_info:
            registry.register(PrototypeEntry.create(UserService, load_unit_id="app"))
        assert exc_info.value.severity.value == "fatal"
        assert str(exc_info.value).startswith("[DUPLICATE_PROTOTYPE]")


# ============================================================================
# Registry: Resolution
# ============================================================================

class TestRegistryResolution:

    def _register(self, registry, proto_id, unit="app", access=AccessLevel.PUBLIC, **qualifiers):
        proto = PrototypeEntry.create(
            UserService,
            load_unit_id=unit,
            name="svc",
            access_level=access,
            qualifiers=q(**qualifiers),
            proto_id=proto_id,
        )
        registry.register(proto)
        return proto

    def test_resolve_by_qualifier(self, registry):
        self._register(registry, "prod", env="prod")
        dev = self._register(registry, "dev", env="dev")
        assert registry.resolve("svc", q(env="dev"), "app") is dev

    def test_not_found(self, registry):
        self._register(registry, "prod", env="prod")
        with pytest.raises(PrototypeNotFoundFault) as exc_info:
            registry.resolve("svc", q(env="staging"), "app")
        assert exc_info.value.metadata["candidates"] == ["prod"]

    def test_unknown_name(self, registry):
        with pytest.raises(PrototypeNotFoundFault):
            registry.resolve("missing")

    def test_fewest_extra_qualifiers_wins(self, registry):
        plain = self._register(registry, "plain")
        self._register(registry, "tagged", env="prod")
        assert registry.resolve("svc", (), "app") is plain

    def test_own_load_unit_wins_tie(self, registry):
        self._register(registry, "a", unit="a", env="prod")
        b = self._register(registry, "b", unit="b", region="us")
        assert registry.resolve("svc", (), "b") is b

    def test_remaining_tie_is_ambiguous(self, registry):
        self._register(registry, "a", unit="a", env="prod")
        self._register(registry, "b", unit="b", region="us")
        with pytest.raises(AmbiguousPrototypeFault) as exc_info:
            registry.resolve("svc", (), "c")
        assert exc_info.value.metadata["ids"] == ["a", "b"]

    def test_private_invisible_from_other_unit(self, registry):
        self._register(registry, "secret", unit="users", access=AccessLevel.PRIVATE)
        with pytest.raises(PrototypeNotFoundFault):
            registry.resolve("svc", (), "orders")

    def test_private_visible_in_own_unit(self, registry):
        secret = self._register(registry, "secret", unit="users", access=AccessLevel.PRIVATE)
        assert registry.resolve("svc", (), "users") is secret

    def test_is_visible(self):
        proto = PrototypeEntry.create(UserService, load_unit_id="users")
        assert PrototypeRegistry.is_visible(proto, "users") is True
        assert PrototypeRegistry.is_visible(proto, None) is False
