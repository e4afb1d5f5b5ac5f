"""
Pydantic v2 models for raw semantic convention group records.

These models describe the already-deserialized input of a resolution run:
one ``GroupSpec`` per declared span, event, metric, resource, scope,
entity or attribute group, each carrying an ordered list of
``AttributeSpec`` records.  An attribute record is either a *reference*
(``ref`` plus optional local overrides) or an *inline declaration*
(``id`` plus ``type``).

All models use ``extra="forbid"`` to reject unknown keys at parse time.

Usage::

    from semconv_registry.resolver.schema import RegistryDocument
    import yaml

    with open("registry/db.yaml") as fh:
        raw = yaml.safe_load(fh)
    document = RegistryDocument.model_validate(raw)
    for group in document.groups:
        print(group.id, group.kind.value)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from semconv_registry.resolver.model import (
    AttributeOverride,
    AttributeType,
    Deprecated,
    RequirementLevel,
    parse_attribute_type,
)
from semconv_registry.types import GroupKind, InstrumentKind, SpanKind, StabilityLevel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Attribute records
# ---------------------------------------------------------------------------


class AttributeSpec(BaseModel):
    """A raw attribute record: a reference or an inline declaration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ref: Optional[str] = Field(
        None, min_length=1, description="Key of the referenced catalog attribute"
    )
    id: Optional[str] = Field(
        None, min_length=1, description="Local id of an inline declaration"
    )
    type: Optional[AttributeType] = Field(
        None, description="Value type (inline declarations only)"
    )
    brief: Optional[str] = None
    note: Optional[str] = None
    requirement_level: Optional[RequirementLevel] = None
    tag: Optional[str] = None
    stability: Optional[StabilityLevel] = None
    deprecated: Optional[Deprecated] = None
    examples: Optional[list[Any]] = None
    sampling_relevant: Optional[bool] = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> Any:
        return parse_attribute_type(v)

    @field_validator("examples", mode="before")
    @classmethod
    def _coerce_examples(cls, v: Any) -> Any:
        if v is None or isinstance(v, list):
            return v
        return [v]

    @model_validator(mode="after")
    def _ref_xor_id(self) -> "AttributeSpec":
        if (self.ref is None) == (self.id is None):
            raise ValueError("attribute must declare exactly one of 'ref' or 'id'")
        if self.id is not None and self.type is None:
            raise ValueError(f"inline attribute '{self.id}' must declare a 'type'")
        return self

    @property
    def is_reference(self) -> bool:
        return self.ref is not None

    @property
    def local_name(self) -> str:
        """The ``ref`` key or the (unprefixed) inline ``id``."""
        return self.ref if self.ref is not None else self.id  # type: ignore[return-value]

    def overrides(self) -> AttributeOverride:
        """The overridable fields exactly as written on this record."""
        return AttributeOverride(
            brief=self.brief,
            note=self.note,
            requirement_level=self.requirement_level,
            tag=self.tag,
            stability=self.stability,
            examples=self.examples,
            deprecated=self.deprecated,
            sampling_relevant=self.sampling_relevant,
        )


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


class GroupSpec(BaseModel):
    """A raw group declaration.

    The YAML field ``type`` carries the group kind; it is exposed as
    ``kind`` to avoid confusion with attribute value types.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Group id (unique per kind)")
    kind: GroupKind = Field(
        GroupKind.ATTRIBUTE_GROUP, alias="type", description="Declaration kind"
    )
    brief: str = ""
    note: str = ""
    prefix: str = Field("", description="Namespace prefix for inline attribute ids")
    extends: Optional[str] = Field(None, min_length=1, description="Parent group id")
    stability: Optional[StabilityLevel] = None
    deprecated: Optional[Deprecated] = None
    attributes: list[AttributeSpec] = Field(default_factory=list)

    # Kind-specific fields
    span_kind: Optional[SpanKind] = None
    events: list[str] = Field(default_factory=list)
    metric_name: Optional[str] = None
    instrument: Optional[InstrumentKind] = None
    unit: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None

    provenance: Optional[str] = Field(
        None, description="Source location stamped by the document loader"
    )

    @field_validator("brief", "note", "prefix", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def location(self) -> str:
        """Human-readable location used in error messages."""
        if self.provenance:
            return f"{self.provenance}#{self.id}"
        return self.id

    def qualify(self, local_id: str) -> str:
        """Apply this group's prefix to an inline attribute id."""
        if not self.prefix or local_id.startswith(f"{self.prefix}."):
            return local_id
        return f"{self.prefix}.{local_id}"


class RegistryDocument(BaseModel):
    """Root model of one semantic convention document (``groups:`` list)."""

    model_config = ConfigDict(extra="forbid")

    groups: list[GroupSpec] = Field(default_factory=list)

    def with_provenance(self, provenance: str) -> "RegistryDocument":
        """Copy of this document with every group stamped with *provenance*."""
        return RegistryDocument(
            groups=[g.model_copy(update={"provenance": provenance}) for g in self.groups]
        )
