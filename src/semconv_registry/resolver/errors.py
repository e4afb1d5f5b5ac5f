"""
Exceptions raised while resolving a semantic convention registry.

Every resolution failure is terminal for the run: no partially resolved
registry is ever returned.  Independent errors discovered in the same
phase (duplicate keys, dangling references, conflicting overrides) are
bundled into a ``CompoundResolutionError`` so registry authors see all of
them in one pass.  Extends-graph errors are raised immediately.

Usage::

    from semconv_registry.resolver.errors import (
        RegistryResolutionError,
        UnresolvedReferenceError,
    )

    try:
        registry = resolve_registry(groups)
    except UnresolvedReferenceError as exc:
        print(exc.key, exc.group_id)
    except RegistryResolutionError as exc:
        for error in getattr(exc, "errors", [exc]):
            print(error)
"""

from __future__ import annotations

from typing import Optional, Sequence


class RegistryResolutionError(Exception):
    """Base class for all registry resolution failures."""


class DuplicateGroupIdError(RegistryResolutionError):
    """Raised when two groups of the same kind share an id."""

    def __init__(self, group_id: str, kind: str, locations: Sequence[str]) -> None:
        self.group_id = group_id
        self.kind = kind
        self.locations = list(locations)
        super().__init__(
            f"Group id '{group_id}' of kind '{kind}' is declared multiple times: "
            f"{', '.join(self.locations)}"
        )


class DuplicateAttributeKeyError(RegistryResolutionError):
    """Raised when two catalog declarations of a key disagree on type or level."""

    def __init__(
        self, key: str, first_location: str, second_location: str, reason: str = ""
    ) -> None:
        self.key = key
        self.first_location = first_location
        self.second_location = second_location
        self.reason = reason
        message = (
            f"Attribute '{key}' is declared incompatibly in "
            f"'{first_location}' and '{second_location}'"
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnresolvedReferenceError(RegistryResolutionError):
    """Raised when an attribute reference names a key absent from the catalog."""

    def __init__(self, key: str, group_id: Optional[str] = None) -> None:
        self.key = key
        self.group_id = group_id
        where = f" in group '{group_id}'" if group_id else ""
        super().__init__(f"Unresolved attribute reference '{key}'{where}")


class InheritanceCycleError(RegistryResolutionError):
    """Raised when an ``extends`` chain revisits one of its own ancestors."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Inheritance cycle detected: {' -> '.join(self.chain)}")


class UnresolvedParentError(RegistryResolutionError):
    """Raised when ``extends`` names a group that does not exist."""

    def __init__(self, group_id: str, extends: str, reason: str = "") -> None:
        self.group_id = group_id
        self.extends = extends
        self.reason = reason
        message = f"Group '{group_id}' extends unknown group '{extends}'"
        if reason:
            message = f"Group '{group_id}' cannot extend '{extends}': {reason}"
        super().__init__(message)


class ConflictingOverrideError(RegistryResolutionError):
    """Raised when a local override is incompatible with the attribute definition."""

    def __init__(self, group_id: str, key: str, field: str, reason: str) -> None:
        self.group_id = group_id
        self.key = key
        self.field = field
        self.reason = reason
        super().__init__(
            f"Conflicting override of '{field}' for attribute '{key}' "
            f"in group '{group_id}': {reason}"
        )


class ResolutionCancelledError(RegistryResolutionError):
    """Raised when the caller's cancellation signal fires mid-run."""

    def __init__(self, group_id: Optional[str] = None) -> None:
        self.group_id = group_id
        where = f" before group '{group_id}'" if group_id else ""
        super().__init__(f"Registry resolution cancelled{where}")


class CompoundResolutionError(RegistryResolutionError):
    """Several independent errors found in one resolution phase."""

    def __init__(self, errors: Sequence[RegistryResolutionError]) -> None:
        flattened: list[RegistryResolutionError] = []
        for error in errors:
            if isinstance(error, CompoundResolutionError):
                flattened.extend(error.errors)
            else:
                flattened.append(error)
        self.errors = flattened
        lines = "\n".join(f"  - {e}" for e in flattened)
        super().__init__(f"{len(flattened)} resolution error(s):\n{lines}")

    @property
    def first(self) -> RegistryResolutionError:
        """The first error in deterministic report order."""
        return self.errors[0]


def raise_collected(errors: Sequence[RegistryResolutionError]) -> None:
    """Raise collected phase errors, if any.

    A single error is raised as itself so callers can catch the specific
    type; several are bundled into ``CompoundResolutionError``.
    """
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise CompoundResolutionError(errors)
