"""
Reference resolution: turns a group's raw attribute records into
materialized attributes against the frozen catalog.

For a reference (``ref``) the catalog entry is looked up by key and the
reference's local overrides are applied field by field: a non-empty
override replaces the catalog value, an unset one inherits it.  ``type``
is never overridable.  Inline declarations (``id``) on non-attribute
groups are materialized directly as group-local attributes; their
override record carries only the fields the record itself wrote.

Errors:
    - Key absent from the catalog        -> ``UnresolvedReferenceError``
    - ``type`` on a reference            -> ``ConflictingOverrideError``
    - ``conditionally_required`` without
      a condition                        -> ``ConflictingOverrideError``
    - ``examples`` incompatible with the
      catalog type (e.g. unknown enum
      member)                            -> ``ConflictingOverrideError``

Requirement strength may legitimately differ per call site, so an
override from ``required`` to ``opt_in`` (or back) is accepted.

Usage::

    from semconv_registry.resolver.references import ReferenceResolver

    resolver = ReferenceResolver(catalog)
    own = resolver.resolve_all(groups)   # group key -> [OwnAttribute]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from semconv_registry.resolver.catalog import AttributeCatalog, materialize_inline
from semconv_registry.resolver.errors import (
    ConflictingOverrideError,
    RegistryResolutionError,
    UnresolvedReferenceError,
    raise_collected,
)
from semconv_registry.resolver.model import (
    ArrayType,
    Attribute,
    AttributeOverride,
    AttributeType,
    EnumType,
    PrimitiveType,
    TemplateType,
)
from semconv_registry.resolver.schema import AttributeSpec, GroupSpec
from semconv_registry.types import AttributeField, GroupKind, PrimitiveTypeName, RequirementLevelKind

logger = logging.getLogger(__name__)

GroupKey = tuple[GroupKind, str]


def group_key(group: GroupSpec) -> GroupKey:
    """Identity of a group: ids are unique per kind."""
    return (group.kind, group.id)


@dataclass(frozen=True)
class OwnAttribute:
    """One of a group's own attribute declarations after reference resolution.

    ``override`` holds exactly the fields the declaration set itself; the
    inheritance merger applies only those over an inherited attribute.
    """

    attribute: Attribute
    override: AttributeOverride
    is_reference: bool
    catalog_group: Optional[str] = None

    @property
    def key(self) -> str:
        return self.attribute.key


class ReferenceResolver:
    """Resolves attribute records against a frozen ``AttributeCatalog``.

    Args:
        catalog: The built catalog.  Never mutated.
        check_examples: Reject ``examples`` overrides that do not fit the
            catalog attribute type.
    """

    def __init__(self, catalog: AttributeCatalog, check_examples: bool = True) -> None:
        self._catalog = catalog
        self._check_examples = check_examples

    def resolve(self, spec: AttributeSpec, group: GroupSpec) -> OwnAttribute:
        """Resolve one attribute record declared on *group*."""
        if not spec.is_reference:
            attr = materialize_inline(group, spec)
            return OwnAttribute(
                attribute=attr,
                override=spec.overrides(),
                is_reference=False,
            )

        key = spec.ref or ""
        entry = self._catalog.entry(key)
        if entry is None:
            raise UnresolvedReferenceError(key=key, group_id=group.id)

        override = spec.overrides()
        self._check_override(spec, override, entry.attribute, group)
        return OwnAttribute(
            attribute=override.apply(entry.attribute),
            override=override,
            is_reference=True,
            catalog_group=entry.group_id,
        )

    def resolve_group(self, group: GroupSpec) -> list[OwnAttribute]:
        """Resolve every record of *group*, collecting all failures."""
        resolved, errors = self._resolve_group(group)
        raise_collected(errors)
        return resolved

    def resolve_all(
        self, groups: Iterable[GroupSpec]
    ) -> dict[GroupKey, list[OwnAttribute]]:
        """Resolve the records of all groups.

        Errors from every group are collected and raised together,
        ordered by group id then declaration order.

        Raises:
            UnresolvedReferenceError: A single dangling reference.
            ConflictingOverrideError: A single incompatible override.
            CompoundResolutionError: Several of the above.
        """
        result: dict[GroupKey, list[OwnAttribute]] = {}
        errors: list[tuple[str, str, list[RegistryResolutionError]]] = []

        for group in groups:
            resolved, group_errors = self._resolve_group(group)
            result[group_key(group)] = resolved
            if group_errors:
                errors.append((group.id, group.kind.value, group_errors))

        errors.sort(key=lambda item: (item[0], item[1]))
        raise_collected([e for _, _, group_errors in errors for e in group_errors])

        logger.debug(
            "Resolved attribute records: groups=%d attributes=%d",
            len(result),
            sum(len(v) for v in result.values()),
        )
        return result

    def _resolve_group(
        self, group: GroupSpec
    ) -> tuple[list[OwnAttribute], list[RegistryResolutionError]]:
        resolved: list[OwnAttribute] = []
        errors: list[RegistryResolutionError] = []
        for spec in group.attributes:
            try:
                resolved.append(self.resolve(spec, group))
            except (UnresolvedReferenceError, ConflictingOverrideError) as exc:
                errors.append(exc)
        return resolved, errors

    def _check_override(
        self,
        spec: AttributeSpec,
        override: AttributeOverride,
        target: Attribute,
        group: GroupSpec,
    ) -> None:
        if spec.type is not None:
            raise ConflictingOverrideError(
                group_id=group.id,
                key=target.key,
                field="type",
                reason="the type is defined by the catalog and cannot be overridden",
            )

        level = override.requirement_level
        if (
            level is not None
            and level.kind == RequirementLevelKind.CONDITIONALLY_REQUIRED
            and not level.text.strip()
        ):
            raise ConflictingOverrideError(
                group_id=group.id,
                key=target.key,
                field=AttributeField.REQUIREMENT_LEVEL.value,
                reason="conditionally_required must carry a condition",
            )

        if self._check_examples and override.examples:
            reason = incompatible_examples(target.type, override.examples)
            if reason:
                raise ConflictingOverrideError(
                    group_id=group.id,
                    key=target.key,
                    field=AttributeField.EXAMPLES.value,
                    reason=reason,
                )


# ---------------------------------------------------------------------------
# Example compatibility
# ---------------------------------------------------------------------------


def _scalar_matches(name: PrimitiveTypeName, value: Any) -> bool:
    if name == PrimitiveTypeName.ANY:
        return True
    if name == PrimitiveTypeName.STRING:
        return isinstance(value, str)
    if name == PrimitiveTypeName.BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if name == PrimitiveTypeName.INT:
        return isinstance(value, int)
    return isinstance(value, (int, float))


def incompatible_examples(attr_type: AttributeType, examples: Sequence[Any]) -> Optional[str]:
    """Explain why *examples* do not fit *attr_type*, or return ``None``."""
    if isinstance(attr_type, TemplateType):
        return None

    if isinstance(attr_type, PrimitiveType):
        for example in examples:
            if not _scalar_matches(attr_type.name, example):
                return f"example {example!r} is not of type {attr_type}"
        return None

    if isinstance(attr_type, ArrayType):
        for example in examples:
            values = example if isinstance(example, (list, tuple)) else (example,)
            for value in values:
                if not _scalar_matches(attr_type.element, value):
                    return f"example {example!r} is not of type {attr_type}"
        return None

    if isinstance(attr_type, EnumType):
        if not attr_type.members:
            return None
        for example in examples:
            if isinstance(example, (list, tuple)) or not attr_type.accepts(example):
                return f"example {example!r} references an undefined enum member"
        return None

    return None
