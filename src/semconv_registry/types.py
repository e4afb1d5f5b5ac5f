"""
Core enums for the semantic convention registry.

Centralised so that raw schema models, resolved models, the namespace
organizer and statistics all agree on the canonical string values.  Each
enum subclasses ``str`` so that values round-trip through YAML/JSON
without custom encoders.

Example:
    from semconv_registry.types import GroupKind, RequirementLevelKind

    GroupKind("span") is GroupKind.SPAN
    RequirementLevelKind.OPT_IN.value  # "opt_in"
"""

from __future__ import annotations

from enum import Enum


class GroupKind(str, Enum):
    """Declaration kind of a semantic convention group."""

    ATTRIBUTE_GROUP = "attribute_group"
    SPAN = "span"
    EVENT = "event"
    METRIC = "metric"
    RESOURCE = "resource"
    SCOPE = "scope"
    ENTITY = "entity"


class SpanKind(str, Enum):
    """OTel span kind declared on span groups."""

    CLIENT = "client"
    SERVER = "server"
    PRODUCER = "producer"
    CONSUMER = "consumer"
    INTERNAL = "internal"


class InstrumentKind(str, Enum):
    """Metric instrument declared on metric groups."""

    COUNTER = "counter"
    UPDOWNCOUNTER = "updowncounter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


class StabilityLevel(str, Enum):
    """Maturity of an attribute, enum member or group."""

    STABLE = "stable"
    DEVELOPMENT = "development"
    EXPERIMENTAL = "experimental"
    ALPHA = "alpha"
    BETA = "beta"
    RELEASE_CANDIDATE = "release_candidate"
    DEPRECATED = "deprecated"


class RequirementLevelKind(str, Enum):
    """How strongly an instrumentation must populate an attribute."""

    REQUIRED = "required"
    CONDITIONALLY_REQUIRED = "conditionally_required"
    RECOMMENDED = "recommended"
    OPT_IN = "opt_in"


class PrimitiveTypeName(str, Enum):
    """Scalar attribute value types."""

    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    ANY = "any"


class ResolutionMode(str, Enum):
    """Where an inherited attribute field came from."""

    REFERENCE = "reference"  # copied from the catalog entry
    EXTENDS = "extends"  # copied from the parent group


class AttributeField(str, Enum):
    """Attribute fields that a reference or child group may override."""

    BRIEF = "brief"
    NOTE = "note"
    REQUIREMENT_LEVEL = "requirement_level"
    TAG = "tag"
    STABILITY = "stability"
    EXAMPLES = "examples"
    DEPRECATED = "deprecated"
    SAMPLING_RELEVANT = "sampling_relevant"


# ---------------------------------------------------------------------------
# Value lists for validation
# ---------------------------------------------------------------------------

REQUIREMENT_LEVEL_VALUES = [r.value for r in RequirementLevelKind]

# Strongest first; used for stable ordering in summaries.
REQUIREMENT_LEVEL_ORDER = [
    RequirementLevelKind.REQUIRED,
    RequirementLevelKind.CONDITIONALLY_REQUIRED,
    RequirementLevelKind.RECOMMENDED,
    RequirementLevelKind.OPT_IN,
]
