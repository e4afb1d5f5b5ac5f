"""
Summary statistics over a resolved registry.

Counts are computed from the frozen catalog and the merged groups; every
breakdown is a plain ``dict[str, int]`` with sorted keys (requirement
levels are ordered strongest first) so ``model_dump()`` is stable.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from semconv_registry.resolver.model import Attribute, EnumType, ResolvedGroup, TemplateType
from semconv_registry.types import REQUIREMENT_LEVEL_ORDER

UNSPECIFIED = "unspecified"


class RegistryStats(BaseModel):
    """Aggregate counts of a resolved registry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    group_count: int = 0
    groups_by_kind: dict[str, int] = Field(default_factory=dict)
    deprecated_group_count: int = 0

    attribute_count: int = Field(0, description="Catalog attributes")
    template_attribute_count: int = 0
    deprecated_attribute_count: int = 0
    attribute_types: dict[str, int] = Field(default_factory=dict)
    attribute_stability: dict[str, int] = Field(default_factory=dict)
    requirement_levels: dict[str, int] = Field(
        default_factory=dict, description="Across all resolved group attributes"
    )

    span_kinds: dict[str, int] = Field(default_factory=dict)
    instruments: dict[str, int] = Field(default_factory=dict)


def _type_category(attr: Attribute) -> str:
    if isinstance(attr.type, EnumType):
        return "enum"
    if isinstance(attr.type, TemplateType):
        return "template"
    return str(attr.type)


def _sorted(counter: Counter) -> dict[str, int]:
    return dict(sorted(counter.items()))


def compute_stats(
    catalog_attributes: Iterable[Attribute], groups: Iterable[ResolvedGroup]
) -> RegistryStats:
    attributes = list(catalog_attributes)
    groups = list(groups)

    levels = Counter(
        attr.requirement_level.kind for group in groups for attr in group.attributes
    )

    return RegistryStats(
        group_count=len(groups),
        groups_by_kind=_sorted(Counter(g.kind.value for g in groups)),
        deprecated_group_count=sum(1 for g in groups if g.is_deprecated),
        attribute_count=len(attributes),
        template_attribute_count=sum(1 for a in attributes if a.is_template),
        deprecated_attribute_count=sum(1 for a in attributes if a.is_deprecated),
        attribute_types=_sorted(Counter(_type_category(a) for a in attributes)),
        attribute_stability=_sorted(
            Counter(a.stability.value if a.stability else UNSPECIFIED for a in attributes)
        ),
        requirement_levels={
            level.value: levels[level] for level in REQUIREMENT_LEVEL_ORDER if levels[level]
        },
        span_kinds=_sorted(Counter(g.span_kind.value for g in groups if g.span_kind)),
        instruments=_sorted(Counter(g.instrument.value for g in groups if g.instrument)),
    )
