"""
Inheritance merger: resolves ``extends`` chains into fully merged groups.

Given the reference-resolved own attributes of every group, each group is
merged over its resolved parent:

1. the working list starts as a copy of the parent's resolved attributes;
2. each own attribute, in declaration order, replaces the inherited
   attribute of the same key *in place* (only the fields it explicitly
   sets are applied) or is appended;
3. the working list becomes ``ResolvedGroup.attributes``.

Before any merge the whole ``extends`` graph is checked: ancestor chains
are walked iteratively with tri-state marking, and a cycle or a dangling
parent aborts the run immediately.

Resolved groups are memoized per ``(kind, id)`` in a map of futures.  The
first caller to claim a group computes it; concurrent callers wait on its
future.  A caller that needs an unclaimed ancestor claims and computes it
itself, so a wait always targets work that is already running.

Usage::

    from semconv_registry.resolver.inheritance import InheritanceMerger

    merger = InheritanceMerger(groups, own_attributes, max_workers=4)
    resolved = merger.merge_all()   # {(kind, id): ResolvedGroup}
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Sequence

from semconv_registry.resolver.errors import (
    ConflictingOverrideError,
    InheritanceCycleError,
    RegistryResolutionError,
    ResolutionCancelledError,
    UnresolvedParentError,
    raise_collected,
)
from semconv_registry.resolver.model import (
    Attribute,
    AttributeLineage,
    AttributeOverride,
    FieldLineage,
    GroupLineage,
    ResolvedGroup,
)
from semconv_registry.resolver.references import GroupKey, OwnAttribute, group_key
from semconv_registry.resolver.schema import GroupSpec
from semconv_registry.types import AttributeField, ResolutionMode

logger = logging.getLogger(__name__)

_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


def _present_fields(attr: Attribute) -> list[AttributeField]:
    return AttributeOverride.from_attribute(attr).set_fields()


class InheritanceMerger:
    """Merges every group over its resolved ``extends`` ancestor chain.

    Args:
        groups: All raw groups of the run, in input order.  Group ids must
            already be unique per kind.
        own_attributes: Reference-resolved own attributes per group key.
        max_workers: Merge groups on a thread pool when greater than 1.
        cancel_event: Checked before every group merge; when set the run
            raises ``ResolutionCancelledError``.
        fail_fast: Raise the first merge conflict instead of collecting.
    """

    def __init__(
        self,
        groups: Sequence[GroupSpec],
        own_attributes: dict[GroupKey, list[OwnAttribute]],
        max_workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
        fail_fast: bool = False,
    ) -> None:
        self._groups = list(groups)
        self._own = own_attributes
        self._max_workers = max(1, max_workers)
        self._cancel_event = cancel_event
        self._fail_fast = fail_fast

        self._by_key: dict[GroupKey, GroupSpec] = {}
        self._by_id: dict[str, list[GroupSpec]] = {}
        for group in self._groups:
            self._by_key[group_key(group)] = group
            self._by_id.setdefault(group.id, []).append(group)

        self._lock = threading.Lock()
        self._memo: dict[GroupKey, Future] = {}
        self._parents: dict[GroupKey, Optional[GroupKey]] = {}

    # ------------------------------------------------------------------
    # Extends graph
    # ------------------------------------------------------------------

    def parent_of(self, group: GroupSpec) -> Optional[GroupSpec]:
        """The group named by ``group.extends``, or ``None`` for roots.

        A parent of the same kind is preferred; otherwise the id must match
        exactly one group of any kind.

        Raises:
            UnresolvedParentError: No group, or several groups of different
                kinds, carry that id.
        """
        if group.extends is None:
            return None
        same_kind = self._by_key.get((group.kind, group.extends))
        if same_kind is not None:
            return same_kind
        candidates = self._by_id.get(group.extends, [])
        if not candidates:
            raise UnresolvedParentError(group_id=group.id, extends=group.extends)
        if len(candidates) > 1:
            kinds = ", ".join(sorted(c.kind.value for c in candidates))
            raise UnresolvedParentError(
                group_id=group.id,
                extends=group.extends,
                reason=f"id is ambiguous across kinds ({kinds})",
            )
        return candidates[0]

    def check_graph(self) -> None:
        """Validate every ``extends`` chain before any merge starts.

        Groups are visited in ``(id, kind)`` order so the reported chain
        does not depend on input order.

        Raises:
            UnresolvedParentError: A chain names a missing parent.
            InheritanceCycleError: A chain revisits one of its own groups.
        """
        state: dict[GroupKey, int] = {}
        for key in sorted(self._by_key, key=lambda k: (k[1], k[0].value)):
            self._walk_chain(key, state)
        logger.debug("Checked extends graph: groups=%d", len(self._by_key))

    def _walk_chain(self, start: GroupKey, state: dict[GroupKey, int]) -> None:
        path: list[GroupKey] = []
        current: Optional[GroupKey] = start
        while current is not None and state.get(current, _UNVISITED) != _DONE:
            if state.get(current) == _IN_PROGRESS:
                cycle = path[path.index(current):] + [current]
                raise InheritanceCycleError([key[1] for key in cycle])
            state[current] = _IN_PROGRESS
            path.append(current)
            current = self._parent_key(current)
        for key in path:
            state[key] = _DONE

    def _parent_key(self, key: GroupKey) -> Optional[GroupKey]:
        if key not in self._parents:
            parent = self.parent_of(self._by_key[key])
            self._parents[key] = group_key(parent) if parent is not None else None
        return self._parents[key]

    def _ancestry(self, key: GroupKey) -> list[GroupKey]:
        """``[key, parent, grandparent, ...]``; the graph is known acyclic."""
        chain = [key]
        parent = self._parent_key(key)
        while parent is not None:
            chain.append(parent)
            parent = self._parent_key(parent)
        return chain

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def resolve_group(self, group: GroupSpec) -> ResolvedGroup:
        """Resolve a single group (and, memoized, its ancestors)."""
        key = group_key(group)
        self._walk_chain(key, {})
        return self._resolve(key)

    def merge_all(self) -> dict[GroupKey, ResolvedGroup]:
        """Resolve every group.

        Returns:
            Resolved groups keyed by ``(kind, id)``, in input order.

        Raises:
            InheritanceCycleError: See ``check_graph``.
            UnresolvedParentError: See ``check_graph``.
            ConflictingOverrideError: An inline re-declaration changes the
                inherited attribute's type.
            CompoundResolutionError: Several conflicts.
            ResolutionCancelledError: The cancellation event was set.
        """
        self.check_graph()
        keys = [group_key(g) for g in self._groups]

        if self._max_workers == 1:
            outcomes = {key: self._outcome(lambda k=key: self._resolve(k)) for key in keys}
        else:
            with ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="semconv-merge"
            ) as pool:
                futures = {key: pool.submit(self._resolve, key) for key in keys}
                outcomes = {key: self._outcome(futures[key].result) for key in keys}

        errors: list[RegistryResolutionError] = []
        seen: set[int] = set()
        for key in sorted(keys, key=lambda k: (k[1], k[0].value)):
            outcome = outcomes[key]
            # A child re-raises its parent's failure; report it once.
            if isinstance(outcome, RegistryResolutionError) and id(outcome) not in seen:
                seen.add(id(outcome))
                errors.append(outcome)
        raise_collected(errors)

        logger.debug("Merged groups: count=%d workers=%d", len(keys), self._max_workers)
        return {key: outcomes[key] for key in keys}  # type: ignore[misc]

    def _outcome(self, compute):
        try:
            return compute()
        except ResolutionCancelledError:
            raise
        except RegistryResolutionError as exc:
            if self._fail_fast:
                raise
            return exc

    def _claim(self, key: GroupKey) -> tuple[Future, bool]:
        with self._lock:
            future = self._memo.get(key)
            if future is not None:
                return future, False
            future = Future()
            self._memo[key] = future
            return future, True

    def _resolve(self, key: GroupKey) -> ResolvedGroup:
        parent: Optional[ResolvedGroup] = None
        for ancestor in reversed(self._ancestry(key)):
            future, owner = self._claim(ancestor)
            if not owner:
                parent = future.result()
                continue
            try:
                self._check_cancelled(ancestor[1])
                resolved = self._merge(self._by_key[ancestor], parent)
            except BaseException as exc:
                future.set_exception(exc)
                raise
            future.set_result(resolved)
            parent = resolved
        assert parent is not None
        return parent

    def _check_cancelled(self, group_id: str) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise ResolutionCancelledError(group_id=group_id)

    def _merge(self, group: GroupSpec, parent: Optional[ResolvedGroup]) -> ResolvedGroup:
        working: list[Attribute] = []
        lineage: dict[str, AttributeLineage] = {}
        index: dict[str, int] = {}

        if parent is not None:
            parent_lineage = {entry.key: entry for entry in parent.lineage.attributes}
            for attr in parent.attributes:
                index[attr.key] = len(working)
                working.append(attr)
                lineage[attr.key] = _inherit_lineage(attr, parent, parent_lineage.get(attr.key))

        errors: list[RegistryResolutionError] = []
        for own in self._own.get(group_key(group), []):
            position = index.get(own.key)
            if position is None:
                index[own.key] = len(working)
                working.append(own.attribute)
                lineage[own.key] = _own_lineage(own, group)
                continue

            base = working[position]
            if not own.is_reference and str(own.attribute.type) != str(base.type):
                errors.append(
                    ConflictingOverrideError(
                        group_id=group.id,
                        key=own.key,
                        field="type",
                        reason=f"inherited type {base.type} cannot change to {own.attribute.type}",
                    )
                )
                continue

            working[position] = own.override.apply(base)
            overridden = set(own.override.set_fields())
            previous = lineage[own.key]
            kept = tuple(entry for entry in previous.fields if entry.field not in overridden)
            lineage[own.key] = previous.model_copy(update={"fields": kept})

        if self._fail_fast and errors:
            raise errors[0]
        raise_collected(errors)

        logger.debug(
            "Merged group '%s' (kind=%s): attributes=%d inherited=%d",
            group.id,
            group.kind.value,
            len(working),
            len(parent.attributes) if parent is not None else 0,
        )
        return ResolvedGroup(
            id=group.id,
            kind=group.kind,
            brief=group.brief,
            note=group.note,
            prefix=group.prefix,
            extends=group.extends,
            stability=group.stability,
            deprecated=group.deprecated,
            span_kind=group.span_kind,
            events=tuple(group.events),
            metric_name=group.metric_name,
            instrument=group.instrument,
            unit=group.unit,
            name=group.name,
            display_name=group.display_name,
            attributes=tuple(working),
            lineage=GroupLineage(
                provenance=group.provenance,
                attributes=tuple(lineage[attr.key] for attr in working),
            ),
            provenance=group.provenance,
        )


def _inherit_lineage(
    attr: Attribute, parent: ResolvedGroup, previous: Optional[AttributeLineage]
) -> AttributeLineage:
    """Lineage of *attr* as seen by a child of *parent*.

    Fields the parent already inherited keep their origin; fields the
    parent set itself are attributed to the parent.
    """
    inherited = {entry.field: entry for entry in previous.fields} if previous is not None else {}
    fields = tuple(
        inherited.get(field)
        or FieldLineage(field=field, mode=ResolutionMode.EXTENDS, group_id=parent.id)
        for field in _present_fields(attr)
    )
    return AttributeLineage(
        key=attr.key,
        source_group=previous.source_group if previous is not None else parent.id,
        fields=fields,
    )


def _own_lineage(own: OwnAttribute, group: GroupSpec) -> AttributeLineage:
    if not own.is_reference or own.catalog_group is None:
        return AttributeLineage(key=own.key, source_group=group.id)
    local = set(own.override.set_fields())
    return AttributeLineage(
        key=own.key,
        source_group=own.catalog_group,
        fields=tuple(
            FieldLineage(field=f, mode=ResolutionMode.REFERENCE, group_id=own.catalog_group)
            for f in _present_fields(own.attribute)
            if f not in local
        ),
    )
