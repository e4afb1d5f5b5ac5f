"""Tests for reference resolution against the frozen catalog."""

from __future__ import annotations

import pytest

from semconv_registry.resolver.catalog import AttributeCatalogBuilder
from semconv_registry.resolver.errors import (
    CompoundResolutionError,
    ConflictingOverrideError,
    UnresolvedReferenceError,
)
from semconv_registry.resolver.references import ReferenceResolver, incompatible_examples
from semconv_registry.resolver.model import parse_attribute_type
from semconv_registry.resolver.schema import AttributeSpec, GroupSpec
from semconv_registry.types import AttributeField, GroupKind, RequirementLevelKind


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def groups(db_registry_groups) -> list[GroupSpec]:
    return [GroupSpec.model_validate(g) for g in db_registry_groups]


@pytest.fixture
def resolver(groups) -> ReferenceResolver:
    return ReferenceResolver(AttributeCatalogBuilder().build(groups))


def _make_span(group_id: str, attributes: list[dict]) -> GroupSpec:
    return GroupSpec.model_validate({"id": group_id, "type": "span", "attributes": attributes})


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestResolveReference:
    def test_plain_reference_copies_catalog_attribute(self, resolver):
        group = _make_span("db", [])
        own = resolver.resolve(AttributeSpec(ref="db.system"), group)
        assert own.is_reference
        assert own.catalog_group == "registry.db"
        assert own.override.set_fields() == []
        assert own.attribute.requirement_level.kind == RequirementLevelKind.REQUIRED
        assert own.attribute.brief == "The database management system."

    def test_cassandra_references_keep_catalog_levels(self, resolver):
        group = _make_span(
            "db.cassandra", [{"ref": "db.cassandra.table"}, {"ref": "db.system"}]
        )
        table, system = resolver.resolve_group(group)
        assert table.attribute.requirement_level.kind == RequirementLevelKind.RECOMMENDED
        assert system.attribute.requirement_level.kind == RequirementLevelKind.REQUIRED

    def test_override_applies_field_by_field(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate(
            {"ref": "db.statement", "brief": "Local brief.", "requirement_level": "opt_in"}
        )
        own = resolver.resolve(spec, group)
        assert own.attribute.brief == "Local brief."
        assert own.attribute.requirement_level.kind == RequirementLevelKind.OPT_IN
        assert own.attribute.examples == ("SELECT * FROM wuser_table",)
        assert own.override.set_fields() == [
            AttributeField.BRIEF,
            AttributeField.REQUIREMENT_LEVEL,
        ]

    def test_strength_may_be_raised(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate(
            {"ref": "db.cassandra.consistency_level", "requirement_level": "required"}
        )
        own = resolver.resolve(spec, group)
        assert own.attribute.requirement_level.kind == RequirementLevelKind.REQUIRED

    def test_conditionally_required_with_condition(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate(
            {"ref": "db.statement", "requirement_level": {"conditionally_required": "If set."}}
        )
        own = resolver.resolve(spec, group)
        assert own.attribute.requirement_level.text == "If set."

    def test_dangling_reference(self, resolver):
        group = _make_span("db", [])
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            resolver.resolve(AttributeSpec(ref="db.nonexistent"), group)
        assert exc_info.value.key == "db.nonexistent"
        assert exc_info.value.group_id == "db"


class TestConflictingOverrides:
    def test_type_on_reference_rejected(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate({"ref": "db.statement", "type": "int"})
        with pytest.raises(ConflictingOverrideError) as exc_info:
            resolver.resolve(spec, group)
        assert exc_info.value.field == "type"
        assert exc_info.value.key == "db.statement"

    @pytest.mark.parametrize(
        "level", ["conditionally_required", {"conditionally_required": "  "}]
    )
    def test_conditionally_required_without_condition(self, resolver, level):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate({"ref": "db.statement", "requirement_level": level})
        with pytest.raises(ConflictingOverrideError) as exc_info:
            resolver.resolve(spec, group)
        assert exc_info.value.field == "requirement_level"

    def test_unknown_enum_example(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate({"ref": "db.system", "examples": ["oracle"]})
        with pytest.raises(ConflictingOverrideError) as exc_info:
            resolver.resolve(spec, group)
        assert exc_info.value.field == "examples"

    def test_known_enum_example(self, resolver):
        group = _make_span("db", [])
        spec = AttributeSpec.model_validate({"ref": "db.system", "examples": ["cassandra"]})
        assert resolver.resolve(spec, group).attribute.examples == ("cassandra",)

    def test_example_check_can_be_disabled(self, groups):
        resolver = ReferenceResolver(
            AttributeCatalogBuilder().build(groups), check_examples=False
        )
        spec = AttributeSpec.model_validate({"ref": "db.statement", "examples": [42]})
        own = resolver.resolve(spec, _make_span("db", []))
        assert own.attribute.examples == (42,)


class TestIncompatibleExamples:
    @pytest.mark.parametrize(
        "notation, examples",
        [
            ("string", ["a", "b"]),
            ("int", [1, 2]),
            ("double", [1, 2.5]),
            ("boolean", [True]),
            ("any", [1, "x", None]),
            ("string[]", [["a", "b"], "c"]),
            ("template[string]", [1]),
        ],
    )
    def test_compatible(self, notation, examples):
        assert incompatible_examples(parse_attribute_type(notation), examples) is None

    @pytest.mark.parametrize(
        "notation, examples",
        [
            ("string", [1]),
            ("int", [True]),
            ("int", [1.5]),
            ("boolean", ["true"]),
            ("int[]", [[1, "2"]]),
        ],
    )
    def test_incompatible(self, notation, examples):
        assert incompatible_examples(parse_attribute_type(notation), examples)


# ---------------------------------------------------------------------------
# Inline declarations and whole-run resolution
# ---------------------------------------------------------------------------


class TestResolveAll:
    def test_inline_on_span_is_group_local(self, resolver):
        group = GroupSpec.model_validate(
            {
                "id": "db.client",
                "type": "span",
                "prefix": "db.client",
                "attributes": [{"id": "connections", "type": "int", "brief": "Count."}],
            }
        )
        (own,) = resolver.resolve_group(group)
        assert not own.is_reference
        assert own.key == "db.client.connections"
        assert own.catalog_group is None
        assert own.override.set_fields() == [AttributeField.BRIEF]
        assert own.attribute.requirement_level.kind == RequirementLevelKind.RECOMMENDED

    def test_results_keyed_by_kind_and_id(self, resolver, groups):
        own = resolver.resolve_all(groups)
        assert (GroupKind.SPAN, "db.cassandra") in own
        assert [a.key for a in own[(GroupKind.SPAN, "db")]] == ["db.system", "db.statement"]

    def test_errors_collected_across_groups(self, resolver):
        groups = [
            _make_span("z.span", [{"ref": "z.missing"}]),
            _make_span("a.span", [{"ref": "a.missing"}, {"ref": "db.system", "type": "int"}]),
        ]
        with pytest.raises(CompoundResolutionError) as exc_info:
            resolver.resolve_all(groups)
        errors = exc_info.value.errors
        assert [type(e) for e in errors] == [
            UnresolvedReferenceError,
            ConflictingOverrideError,
            UnresolvedReferenceError,
        ]
        assert errors[0].key == "a.missing"
        assert errors[2].key == "z.missing"

    def test_single_error_raised_as_itself(self, resolver):
        with pytest.raises(UnresolvedReferenceError):
            resolver.resolve_all([_make_span("db", [{"ref": "db.nonexistent"}])])
