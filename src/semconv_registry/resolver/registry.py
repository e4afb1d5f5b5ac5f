"""
Resolved registry aggregate and the resolution orchestrator.

``resolve_registry()`` runs the phases in a fixed order and either
returns a complete ``ResolvedRegistry`` or raises; no partially resolved
registry is ever exposed.

1. group ids are checked for uniqueness per kind;
2. the attribute catalog is built and frozen;
3. every group's attribute records are reference-resolved;
4. the ``extends`` graph is checked and groups are merged;
5. the namespace index is computed.

Usage::

    from semconv_registry.resolver import resolve_registry

    registry = resolve_registry(groups)
    registry.attribute("db.system")
    for family, span_ids in registry.namespaces_of_kind(GroupKind.SPAN):
        ...
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from semconv_registry.config import RegistryConfig, get_config
from semconv_registry.logger import ResolutionLogger
from semconv_registry.resolver.catalog import AttributeCatalog, AttributeCatalogBuilder
from semconv_registry.resolver.errors import (
    CompoundResolutionError,
    DuplicateGroupIdError,
    RegistryResolutionError,
    ResolutionCancelledError,
    raise_collected,
)
from semconv_registry.resolver.inheritance import InheritanceMerger
from semconv_registry.resolver.model import Attribute, ResolvedGroup
from semconv_registry.resolver.namespaces import NamespaceOrganizer
from semconv_registry.resolver.otel import emit_resolution_complete, emit_resolution_failed
from semconv_registry.resolver.references import ReferenceResolver
from semconv_registry.resolver.schema import GroupSpec
from semconv_registry.resolver.stats import RegistryStats, compute_stats
from semconv_registry.types import GroupKind

logger = logging.getLogger(__name__)

NamespaceFamilies = list[tuple[str, list[str]]]


class ResolvedRegistry:
    """Immutable result of a resolution run: catalog, merged groups, namespace index."""

    def __init__(
        self,
        catalog: AttributeCatalog,
        groups: Sequence[ResolvedGroup],
        organizer: Optional[NamespaceOrganizer] = None,
        declared_namespaces: Optional[Iterable[str]] = None,
    ) -> None:
        self._catalog = catalog
        self._groups = tuple(groups)
        self._organizer = organizer or NamespaceOrganizer()
        self._declared = (
            tuple(declared_namespaces) if declared_namespaces is not None else None
        )

        self._by_key: dict[tuple[GroupKind, str], ResolvedGroup] = {
            (g.kind, g.id): g for g in self._groups
        }
        self._namespaces: dict[GroupKind, NamespaceFamilies] = {}
        for kind in GroupKind:
            families = self._organizer.organize(
                self._groups, kind, self._declared, sort_key=lambda g: g.id
            )
            self._namespaces[kind] = [
                (family, [g.id for g in members]) for family, members in families
            ]

    def __repr__(self) -> str:
        return (
            f"ResolvedRegistry(attributes={len(self._catalog)}, "
            f"groups={len(self._groups)})"
        )

    # -- Attributes ----------------------------------------------------

    def attribute(self, key: str) -> Optional[Attribute]:
        """The catalog attribute with *key*, or ``None``."""
        return self._catalog.get(key)

    @property
    def attribute_catalog(self) -> AttributeCatalog:
        return self._catalog

    @property
    def catalog(self) -> dict[str, list[Attribute]]:
        """Catalog attributes by root namespace (namespaces and keys sorted)."""
        return self._catalog.by_root_namespace()

    def attributes_in_namespace(self, namespace: str) -> list[Attribute]:
        """Catalog attributes at or below the dotted *namespace*, sorted by key."""
        prefix = f"{namespace}."
        return [
            attr
            for key, attr in self._catalog.items()
            if key == namespace or key.startswith(prefix)
        ]

    def attribute_families(self) -> NamespaceFamilies:
        """Catalog keys bucketed by (declared) root namespace."""
        return [
            (family, [a.key for a in members])
            for family, members in self._organizer.organize_attributes(
                self._catalog.values(), self._declared
            )
        ]

    # -- Groups --------------------------------------------------------

    @property
    def groups(self) -> tuple[ResolvedGroup, ...]:
        """All resolved groups in input order."""
        return self._groups

    def group(self, group_id: str, kind: Optional[GroupKind] = None) -> Optional[ResolvedGroup]:
        """Look up a group by id; without *kind* the first kind (enum order) wins."""
        if kind is not None:
            return self._by_key.get((kind, group_id))
        for candidate in GroupKind:
            found = self._by_key.get((candidate, group_id))
            if found is not None:
                return found
        return None

    def groups_of_kind(self, kind: GroupKind) -> list[ResolvedGroup]:
        """Resolved groups of *kind*, sorted by id."""
        return sorted((g for g in self._groups if g.kind == kind), key=lambda g: g.id)

    def namespaces_of_kind(self, kind: GroupKind) -> NamespaceFamilies:
        """``(family, [group_id])`` pairs for *kind*; families and ids sorted."""
        return [(family, list(ids)) for family, ids in self._namespaces[kind]]

    def namespace_index(self) -> dict[str, NamespaceFamilies]:
        """Namespace families of every kind that has at least one group."""
        return {
            kind.value: self.namespaces_of_kind(kind)
            for kind in GroupKind
            if self._namespaces[kind]
        }

    # -- Views ---------------------------------------------------------

    def compatibility_snapshot(self) -> dict[str, dict[str, Optional[str]]]:
        """Stability and requirement level of every catalog attribute, by key."""
        return {
            key: {
                "stability": attr.stability.value if attr.stability else None,
                "requirement_level": attr.requirement_level.kind.value,
            }
            for key, attr in self._catalog.items()
        }

    def stats(self) -> RegistryStats:
        return compute_stats(self._catalog.values(), self._groups)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable dump with a stable order, independent of input order."""
        return {
            "catalog": [
                attr.model_dump(mode="json", exclude_none=True)
                for attr in self._catalog.values()
            ],
            "groups": [
                group.model_dump(mode="json", exclude_none=True)
                for group in sorted(self._groups, key=lambda g: (g.kind.value, g.id))
            ],
            "namespaces": {
                kind: [[family, ids] for family, ids in families]
                for kind, families in self.namespace_index().items()
            },
        }


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

GroupInput = Union[GroupSpec, Mapping[str, Any]]


class RegistryResolver:
    """Runs a full resolution over an in-memory snapshot of groups.

    Args:
        config: Settings; defaults to the global ``get_config()``.
        cancel_event: Optional external cancellation signal, checked
            between phases and before every group merge.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.config = config or get_config()
        self.cancel_event = cancel_event
        self.organizer = NamespaceOrganizer(other_family=self.config.other_family)

    def resolve(self, groups: Iterable[GroupInput]) -> ResolvedRegistry:
        """Resolve *groups* into a ``ResolvedRegistry``.

        Raises:
            pydantic.ValidationError: A mapping is not a valid group record.
            RegistryResolutionError: Any resolution failure (see
                ``semconv_registry.resolver.errors``).
        """
        specs = [g if isinstance(g, GroupSpec) else GroupSpec.model_validate(g) for g in groups]
        events = ResolutionLogger(config=self.config)
        events.log_started(group_count=len(specs), max_workers=self.config.max_workers)
        started = time.perf_counter()
        phase = "groups"

        try:
            self._check_cancelled()
            self._check_unique_ids(specs)

            phase = "catalog"
            self._check_cancelled()
            catalog = AttributeCatalogBuilder().build(specs)

            phase = "references"
            self._check_cancelled()
            own = ReferenceResolver(
                catalog, check_examples=self.config.check_override_examples
            ).resolve_all(specs)

            phase = "inheritance"
            self._check_cancelled()
            merged = InheritanceMerger(
                specs,
                own,
                max_workers=self.config.max_workers,
                cancel_event=self.cancel_event,
                fail_fast=self.config.fail_fast,
            ).merge_all()

            phase = "namespaces"
            self._check_cancelled()
            registry = ResolvedRegistry(
                catalog,
                list(merged.values()),
                organizer=self.organizer,
                declared_namespaces=self.config.declared_namespaces,
            )
        except ResolutionCancelledError as exc:
            logger.warning("Registry resolution cancelled during %s phase", phase)
            events.log_cancelled(group_id=exc.group_id, phase=phase)
            emit_resolution_failed(exc)
            raise
        except RegistryResolutionError as exc:
            error = exc
            if self.config.fail_fast and isinstance(exc, CompoundResolutionError):
                error = exc.first
            count = len(error.errors) if isinstance(error, CompoundResolutionError) else 1
            events.log_failed(
                error_type=type(error).__name__,
                error_count=count,
                message=str(error),
                phase=phase,
            )
            emit_resolution_failed(error)
            if error is exc:
                raise
            raise error from None

        duration_ms = (time.perf_counter() - started) * 1000
        stats = registry.stats()
        logger.info(
            "Resolved registry: groups=%d attributes=%d workers=%d duration_ms=%.1f",
            stats.group_count,
            stats.attribute_count,
            self.config.max_workers,
            duration_ms,
        )
        events.log_completed(
            group_count=stats.group_count,
            attribute_count=stats.attribute_count,
            duration_ms=duration_ms,
            groups_by_kind=stats.groups_by_kind,
        )
        emit_resolution_complete(stats, duration_ms)
        return registry

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ResolutionCancelledError()

    def _check_unique_ids(self, specs: Sequence[GroupSpec]) -> None:
        locations: dict[tuple[str, str], list[str]] = {}
        for spec in specs:
            locations.setdefault((spec.id, spec.kind.value), []).append(spec.location)
        errors = [
            DuplicateGroupIdError(group_id=group_id, kind=kind, locations=sorted(locs))
            for (group_id, kind), locs in sorted(locations.items())
            if len(locs) > 1
        ]
        raise_collected(errors)


def resolve_registry(
    groups: Iterable[GroupInput],
    config: Optional[RegistryConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ResolvedRegistry:
    """Resolve *groups* with ``RegistryResolver``; see its docstring."""
    return RegistryResolver(config=config, cancel_event=cancel_event).resolve(groups)
