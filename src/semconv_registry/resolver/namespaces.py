"""
Namespace organizer: deterministic family grouping for presentation.

Family derivation:

- the *namespace source* of a group is its ``prefix`` when set, otherwise
  its id with a leading kind token (``registry.``, ``span.``, ...) removed;
- for spans, events, metrics, resources, scopes and entities the family is
  the first segment after the root (``db.cassandra`` -> ``cassandra``);
  a namespace without a second segment (``db``) falls into ``other``;
- for attribute groups (and catalog attributes) the family is the root
  namespace itself; when declared namespaces are supplied, undeclared
  roots fall into ``other``.

Families are sorted lexicographically.  Members keep their input order
unless a secondary sort key is given.  Nothing is mutated.

Usage::

    from semconv_registry.resolver.namespaces import NamespaceOrganizer

    organizer = NamespaceOrganizer()
    for family, spans in organizer.organize(spans, GroupKind.SPAN):
        print(family, [s.id for s in spans])
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Protocol, TypeVar

from semconv_registry.resolver.model import Attribute
from semconv_registry.types import GroupKind

OTHER_FAMILY = "other"

# Leading id tokens that name the declaration kind rather than a namespace.
KIND_TOKENS = ("registry", "span", "event", "metric", "resource", "entity", "scope")


class _Namespaced(Protocol):
    id: str
    prefix: str
    kind: GroupKind


G = TypeVar("G", bound=_Namespaced)


def namespace_source(group: _Namespaced) -> str:
    """The dotted namespace a group's family is derived from."""
    if group.prefix:
        return group.prefix
    for token in KIND_TOKENS:
        if group.id.startswith(f"{token}."):
            return group.id[len(token) + 1:]
    return group.id


def root_namespace(namespace: str) -> str:
    return namespace.split(".", 1)[0]


class NamespaceOrganizer:
    """Groups resolved entities into ordered ``(family, members)`` pairs."""

    def __init__(self, other_family: str = OTHER_FAMILY) -> None:
        self.other_family = other_family

    def family_of(
        self,
        group: _Namespaced,
        declared_namespaces: Optional[Iterable[str]] = None,
    ) -> str:
        source = namespace_source(group)
        if group.kind == GroupKind.ATTRIBUTE_GROUP:
            return self._root_family(root_namespace(source), declared_namespaces)
        segments = source.split(".")
        if len(segments) < 2 or not segments[1]:
            return self.other_family
        return segments[1]

    def organize(
        self,
        groups: Iterable[G],
        kind: Optional[GroupKind] = None,
        declared_namespaces: Optional[Iterable[str]] = None,
        sort_key: Optional[Callable[[G], Any]] = None,
    ) -> list[tuple[str, list[G]]]:
        """Bucket *groups* (optionally only those of *kind*) into families."""
        declared = set(declared_namespaces) if declared_namespaces is not None else None
        families: dict[str, list[G]] = {}
        for group in groups:
            if kind is not None and group.kind != kind:
                continue
            families.setdefault(self.family_of(group, declared), []).append(group)
        return self._ordered(families, sort_key)

    def organize_attributes(
        self,
        attributes: Iterable[Attribute],
        declared_namespaces: Optional[Iterable[str]] = None,
    ) -> list[tuple[str, list[Attribute]]]:
        """Bucket catalog attributes by root namespace, sorted by key."""
        declared = set(declared_namespaces) if declared_namespaces is not None else None
        families: dict[str, list[Attribute]] = {}
        for attr in attributes:
            family = self._root_family(attr.root_namespace, declared)
            families.setdefault(family, []).append(attr)
        return self._ordered(families, lambda a: a.key)

    def _root_family(self, root: str, declared: Optional[Iterable[str]]) -> str:
        if declared is not None and root not in declared:
            return self.other_family
        return root

    @staticmethod
    def _ordered(families: dict, sort_key: Optional[Callable[[Any], Any]]) -> list:
        ordered = []
        for family in sorted(families):
            members = families[family]
            if sort_key is not None:
                members = sorted(members, key=sort_key)
            ordered.append((family, members))
        return ordered
