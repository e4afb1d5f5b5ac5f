"""
Attribute catalog: the frozen, key-indexed set of registry-level attributes.

The builder walks every ``attribute_group`` in declaration order and
collects its inline attribute declarations (group prefix applied).  Two
declarations of the same key are:

- identical, or different only in presentation fields (brief, note,
  examples, ...) -> deduplicated; the declaration with the smallest
  location wins;
- different in ``type`` or ``requirement_level`` -> ``DuplicateAttributeKeyError``.

Every re-declaration is compared with the declaration at the smallest
location, so the catalog and the reported errors do not depend on input
order.

All duplicate-key errors are collected before raising.  The resulting
``AttributeCatalog`` is read-only and may be shared across threads.

Usage::

    from semconv_registry.resolver.catalog import AttributeCatalogBuilder

    catalog = AttributeCatalogBuilder().build(groups)
    catalog.get("db.system")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from semconv_registry.resolver.errors import (
    DuplicateAttributeKeyError,
    raise_collected,
)
from semconv_registry.resolver.model import Attribute, RequirementLevel
from semconv_registry.resolver.schema import AttributeSpec, GroupSpec
from semconv_registry.types import GroupKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """A catalog attribute plus the group that declared it."""

    attribute: Attribute
    group_id: str
    location: str


def materialize_inline(group: GroupSpec, spec: AttributeSpec) -> Attribute:
    """Build an ``Attribute`` from an inline declaration of *group*."""
    overrides = spec.overrides()
    return Attribute(
        key=group.qualify(spec.id or ""),
        type=spec.type,
        brief=overrides.brief or "",
        note=overrides.note or "",
        requirement_level=overrides.requirement_level or RequirementLevel(),
        stability=overrides.stability,
        deprecated=overrides.deprecated,
        tag=overrides.tag,
        examples=overrides.examples,
        sampling_relevant=overrides.sampling_relevant,
    )


class AttributeCatalog(Mapping[str, Attribute]):
    """Read-only mapping of attribute key -> catalog ``Attribute``."""

    def __init__(self, entries: Mapping[str, CatalogEntry]) -> None:
        self._entries = MappingProxyType(dict(sorted(entries.items())))

    def __getitem__(self, key: str) -> Attribute:
        return self._entries[key].attribute

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, key: str) -> Optional[CatalogEntry]:
        return self._entries.get(key)

    def by_root_namespace(self) -> dict[str, list[Attribute]]:
        """Catalog attributes grouped by root namespace, keys sorted."""
        grouped: dict[str, list[Attribute]] = {}
        for key in self._entries:
            attr = self._entries[key].attribute
            grouped.setdefault(attr.root_namespace, []).append(attr)
        return grouped


class AttributeCatalogBuilder:
    """Collects attribute-group declarations into an ``AttributeCatalog``."""

    def build(self, groups: Iterable[GroupSpec]) -> AttributeCatalog:
        """Build and freeze the catalog.

        Args:
            groups: All raw groups of the run, in input order.  Only
                ``attribute_group`` declarations contribute.

        Returns:
            The frozen catalog.

        Raises:
            DuplicateAttributeKeyError: One incompatible re-declaration.
            CompoundResolutionError: Several incompatible re-declarations.
        """
        declarations: dict[str, list[CatalogEntry]] = {}
        for group in groups:
            if group.kind != GroupKind.ATTRIBUTE_GROUP:
                continue
            for spec in group.attributes:
                if spec.is_reference:
                    continue
                attr = materialize_inline(group, spec)
                declarations.setdefault(attr.key, []).append(
                    CatalogEntry(attr, group.id, group.location)
                )

        entries: dict[str, CatalogEntry] = {}
        errors: list[DuplicateAttributeKeyError] = []
        deduplicated = 0

        for key, candidates in declarations.items():
            winner, *others = sorted(candidates, key=lambda e: e.location)
            entries[key] = winner
            for other in others:
                if winner.attribute.material_signature() != other.attribute.material_signature():
                    errors.append(
                        DuplicateAttributeKeyError(
                            key=key,
                            first_location=winner.location,
                            second_location=other.location,
                            reason=_describe_difference(winner.attribute, other.attribute),
                        )
                    )
                elif winner.attribute == other.attribute:
                    deduplicated += 1
                else:
                    logger.debug(
                        "Attribute '%s' re-declared in '%s' and '%s' with different "
                        "presentation fields",
                        key,
                        winner.location,
                        other.location,
                    )

        raise_collected(
            sorted(errors, key=lambda e: (e.key, e.first_location, e.second_location))
        )

        catalog = AttributeCatalog(entries)
        logger.debug(
            "Built attribute catalog: attributes=%d deduplicated=%d",
            len(catalog),
            deduplicated,
        )
        return catalog


def _describe_difference(first: Attribute, second: Attribute) -> str:
    if str(first.type) != str(second.type):
        return f"type {first.type} != {second.type}"
    return f"requirement level {first.requirement_level} != {second.requirement_level}"

