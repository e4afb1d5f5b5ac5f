"""
Resolved read model of a semantic convention registry.

These are the immutable (``frozen=True``) Pydantic models that renderers
and the compatibility evaluator consume: fully materialized attributes,
merged groups and per-field lineage.  The same value types
(``RequirementLevel``, ``Deprecated``, attribute types) are also used by
the raw input schema; each accepts the compact YAML notation used in
semantic convention documents as well as its explicit field form.

Usage::

    from semconv_registry.resolver.model import Attribute, RequirementLevel

    attr = Attribute(
        key="db.system",
        type="string",
        requirement_level="required",
    )
    attr.root_namespace          # "db"
    str(attr.requirement_level)  # "required"
"""

from __future__ import annotations

import re
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from semconv_registry.types import (
    REQUIREMENT_LEVEL_VALUES,
    AttributeField,
    GroupKind,
    InstrumentKind,
    PrimitiveTypeName,
    RequirementLevelKind,
    ResolutionMode,
    SpanKind,
    StabilityLevel,
)

# Legacy string deprecations such as "Replaced by `http.request.method`."
_RENAMED_RE = re.compile(r"(?i)\b(?:replaced? by|use(?: the)?)\s+`([\w]+(?:\.[\w]+)*)`")

_TEMPLATE_RE = re.compile(r"^template\[(?P<inner>[a-z]+(?:\[\])?)\]$")


# ---------------------------------------------------------------------------
# Requirement level / deprecation
# ---------------------------------------------------------------------------


class RequirementLevel(BaseModel):
    """Requirement level with optional condition or recommendation text.

    Accepts ``"required"``, ``{"conditionally_required": "<condition>"}``,
    ``{"recommended": "<text>"}`` or ``{"opt_in": "<text>"}`` as raw input.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: RequirementLevelKind = RequirementLevelKind.RECOMMENDED
    text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_notation(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"kind": data}
        if isinstance(data, dict) and len(data) == 1:
            name, text = next(iter(data.items()))
            if name in REQUIREMENT_LEVEL_VALUES:
                return {"kind": name, "text": text or ""}
        return data

    def __str__(self) -> str:
        if self.text:
            return f"{self.kind.value}: {self.text}"
        return self.kind.value

    @property
    def is_required(self) -> bool:
        return self.kind == RequirementLevelKind.REQUIRED


class Deprecated(BaseModel):
    """Deprecation metadata: an explanatory note and an optional replacement."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    note: str = ""
    renamed_to: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_notation(cls, data: Any) -> Any:
        if isinstance(data, str):
            match = _RENAMED_RE.search(data)
            return {"note": data, "renamed_to": match.group(1) if match else None}
        if isinstance(data, dict) and "action" in data:
            # Structured form: {action: renamed, renamed_to: x, note: ...}
            return {
                "note": data.get("note") or "",
                "renamed_to": data.get("renamed_to") or data.get("new_name"),
            }
        return data


# ---------------------------------------------------------------------------
# Attribute types (tagged union)
# ---------------------------------------------------------------------------


class PrimitiveType(BaseModel):
    """A scalar type such as ``string`` or ``int``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["primitive"] = "primitive"
    name: PrimitiveTypeName

    def __str__(self) -> str:
        return self.name.value


class ArrayType(BaseModel):
    """A homogeneous array type such as ``string[]``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["array"] = "array"
    element: PrimitiveTypeName

    def __str__(self) -> str:
        return f"{self.element.value}[]"


class EnumMember(BaseModel):
    """One member of an enum attribute type."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    value: Union[bool, int, float, str]
    brief: Optional[str] = None
    note: Optional[str] = None
    stability: Optional[StabilityLevel] = None
    deprecated: Optional[Deprecated] = None


class EnumType(BaseModel):
    """An (open) enum type listing well-known members."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["enum"] = "enum"
    members: tuple[EnumMember, ...] = ()

    def __str__(self) -> str:
        return "enum {" + ", ".join(m.id for m in self.members) + "}"

    def accepts(self, value: Any) -> bool:
        """True if *value* is a member id or a member value."""
        return any(value == m.id or value == m.value for m in self.members)


class TemplateType(BaseModel):
    """A template type; keys accept dynamic suffixes and are never expanded."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["template"] = "template"
    inner: str

    def __str__(self) -> str:
        return f"template[{self.inner}]"


AttributeType = Union[PrimitiveType, ArrayType, EnumType, TemplateType]


def parse_attribute_type(raw: Any) -> Any:
    """Convert semantic convention type notation into an attribute type.

    ``"string"`` -> ``PrimitiveType``; ``"int[]"`` -> ``ArrayType``;
    ``"template[string]"`` -> ``TemplateType``; ``{"members": [...]}`` ->
    ``EnumType``.  Anything else is returned unchanged for Pydantic to
    validate.
    """
    if isinstance(raw, str):
        notation = raw.strip()
        template = _TEMPLATE_RE.match(notation)
        if template:
            return TemplateType(inner=template.group("inner"))
        if notation.endswith("[]"):
            return ArrayType(element=notation[:-2])
        return PrimitiveType(name=notation)
    if isinstance(raw, dict) and "members" in raw and "kind" not in raw:
        return EnumType(members=raw["members"])
    return raw


def _normalize_examples(raw: Any) -> Any:
    """Examples as a tuple; array examples become nested tuples."""
    if raw is None:
        return raw
    if not isinstance(raw, (list, tuple)):
        raw = [raw]
    return tuple(tuple(v) if isinstance(v, list) else v for v in raw)


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


class Attribute(BaseModel):
    """A fully materialized attribute (no remaining references)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str = Field(..., min_length=1, description="Dotted attribute key")
    type: AttributeType
    brief: str = ""
    note: str = ""
    requirement_level: RequirementLevel = Field(default_factory=RequirementLevel)
    stability: Optional[StabilityLevel] = None
    deprecated: Optional[Deprecated] = None
    tag: Optional[str] = None
    examples: Optional[tuple[Any, ...]] = None
    sampling_relevant: Optional[bool] = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> Any:
        return parse_attribute_type(v)

    @field_validator("examples", mode="before")
    @classmethod
    def _coerce_examples(cls, v: Any) -> Any:
        return _normalize_examples(v)

    @property
    def root_namespace(self) -> str:
        return self.key.split(".", 1)[0]

    @property
    def is_template(self) -> bool:
        return isinstance(self.type, TemplateType)

    @property
    def is_deprecated(self) -> bool:
        return (
            self.deprecated is not None
            or self.stability == StabilityLevel.DEPRECATED
        )

    def material_signature(self) -> tuple[str, str]:
        """The fields whose disagreement makes two declarations incompatible."""
        return (str(self.type), self.requirement_level.kind.value)


class AttributeOverride(BaseModel):
    """Explicit per-field override record.

    Holds the values a reference, or a child group's re-declaration,
    supplies for the overridable fields.  Empty values (``None``, ``""``,
    empty sequences) mean "not set" and leave the inherited value untouched.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    brief: Optional[str] = None
    note: Optional[str] = None
    requirement_level: Optional[RequirementLevel] = None
    tag: Optional[str] = None
    stability: Optional[StabilityLevel] = None
    examples: Optional[tuple[Any, ...]] = None
    deprecated: Optional[Deprecated] = None
    sampling_relevant: Optional[bool] = None

    @field_validator("examples", mode="before")
    @classmethod
    def _coerce_examples(cls, v: Any) -> Any:
        return _normalize_examples(v)

    def set_fields(self) -> list[AttributeField]:
        """Fields carrying a non-empty value, in enum declaration order."""
        fields = []
        for field in AttributeField:
            value = getattr(self, field.value)
            if value is None or value in ("", [], ()):
                continue
            fields.append(field)
        return fields

    def apply(self, base: Attribute) -> Attribute:
        """Return *base* with every set field replaced.  ``type`` never changes."""
        update = {f.value: getattr(self, f.value) for f in self.set_fields()}
        if not update:
            return base
        return base.model_copy(update=update)

    @classmethod
    def from_attribute(cls, attr: Attribute) -> "AttributeOverride":
        """Override record setting every non-empty field of *attr*."""
        return cls(**{f.value: getattr(attr, f.value) for f in AttributeField})


# ---------------------------------------------------------------------------
# Lineage
# ---------------------------------------------------------------------------


class FieldLineage(BaseModel):
    """Where an inherited attribute field was copied from."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: AttributeField
    mode: ResolutionMode
    group_id: str


class AttributeLineage(BaseModel):
    """Provenance of one attribute in a resolved group.

    ``source_group`` is the group that introduced the attribute into the
    inheritance chain; ``fields`` lists only inherited fields, in
    ``AttributeField`` order.  Fields set locally by the resolved group
    have no entry.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str
    source_group: str
    fields: tuple[FieldLineage, ...] = ()

    def inherited(self, field: AttributeField) -> Optional[FieldLineage]:
        for lineage in self.fields:
            if lineage.field == field:
                return lineage
        return None


class GroupLineage(BaseModel):
    """Lineage of every attribute in a resolved group, in attribute order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    provenance: Optional[str] = None
    attributes: tuple[AttributeLineage, ...] = ()

    def attribute(self, key: str) -> Optional[AttributeLineage]:
        for lineage in self.attributes:
            if lineage.key == key:
                return lineage
        return None



# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


class ResolvedGroup(BaseModel):
    """A group after reference resolution and inheritance merge."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    kind: GroupKind
    brief: str = ""
    note: str = ""
    prefix: str = ""
    extends: Optional[str] = None
    stability: Optional[StabilityLevel] = None
    deprecated: Optional[Deprecated] = None
    span_kind: Optional[SpanKind] = None
    events: tuple[str, ...] = ()
    metric_name: Optional[str] = None
    instrument: Optional[InstrumentKind] = None
    unit: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    attributes: tuple[Attribute, ...] = ()
    lineage: GroupLineage = Field(default_factory=GroupLineage)
    provenance: Optional[str] = None

    @property
    def is_deprecated(self) -> bool:
        return (
            self.deprecated is not None
            or self.stability == StabilityLevel.DEPRECATED
        )

    def attribute(self, key: str) -> Optional[Attribute]:
        for attr in self.attributes:
            if attr.key == key:
                return attr
        return None

    def attribute_keys(self) -> list[str]:
        return [attr.key for attr in self.attributes]
