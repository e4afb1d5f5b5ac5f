"""
Semantic convention registry resolution.

Turns raw convention groups (attribute groups, spans, events, metrics,
resources, scopes, entities) into a fully resolved, immutable registry:
every attribute reference replaced by a materialized attribute, every
``extends`` chain merged with override-by-key semantics, and every group
placed in a deterministic namespace family.

Public API::

    from semconv_registry.resolver import (
        # Input records
        GroupSpec,
        AttributeSpec,
        RegistryDocument,
        RegistryLoader,
        # Resolved model
        Attribute,
        ResolvedGroup,
        ResolvedRegistry,
        # Components
        AttributeCatalogBuilder,
        ReferenceResolver,
        InheritanceMerger,
        NamespaceOrganizer,
        # Orchestration
        RegistryResolver,
        resolve_registry,
        # Errors
        RegistryResolutionError,
    )
"""

from semconv_registry.resolver.catalog import (
    AttributeCatalog,
    AttributeCatalogBuilder,
    CatalogEntry,
)
from semconv_registry.resolver.errors import (
    CompoundResolutionError,
    ConflictingOverrideError,
    DuplicateAttributeKeyError,
    DuplicateGroupIdError,
    InheritanceCycleError,
    RegistryResolutionError,
    ResolutionCancelledError,
    UnresolvedParentError,
    UnresolvedReferenceError,
)
from semconv_registry.resolver.inheritance import InheritanceMerger
from semconv_registry.resolver.loader import RegistryLoader
from semconv_registry.resolver.model import (
    ArrayType,
    Attribute,
    AttributeLineage,
    AttributeOverride,
    Deprecated,
    EnumMember,
    EnumType,
    FieldLineage,
    GroupLineage,
    PrimitiveType,
    RequirementLevel,
    ResolvedGroup,
    TemplateType,
)
from semconv_registry.resolver.namespaces import NamespaceOrganizer
from semconv_registry.resolver.otel import (
    emit_resolution_complete,
    emit_resolution_failed,
)
from semconv_registry.resolver.references import OwnAttribute, ReferenceResolver
from semconv_registry.resolver.registry import (
    RegistryResolver,
    ResolvedRegistry,
    resolve_registry,
)
from semconv_registry.resolver.schema import AttributeSpec, GroupSpec, RegistryDocument
from semconv_registry.resolver.stats import RegistryStats

__all__ = [
    # Input records
    "AttributeSpec",
    "GroupSpec",
    "RegistryDocument",
    "RegistryLoader",
    # Model
    "Attribute",
    "AttributeOverride",
    "RequirementLevel",
    "Deprecated",
    "PrimitiveType",
    "ArrayType",
    "EnumType",
    "EnumMember",
    "TemplateType",
    "ResolvedGroup",
    "FieldLineage",
    "AttributeLineage",
    "GroupLineage",
    # Components
    "AttributeCatalog",
    "AttributeCatalogBuilder",
    "CatalogEntry",
    "ReferenceResolver",
    "OwnAttribute",
    "InheritanceMerger",
    "NamespaceOrganizer",
    # Registry
    "ResolvedRegistry",
    "RegistryResolver",
    "RegistryStats",
    "resolve_registry",
    # Errors
    "RegistryResolutionError",
    "DuplicateGroupIdError",
    "DuplicateAttributeKeyError",
    "UnresolvedReferenceError",
    "InheritanceCycleError",
    "UnresolvedParentError",
    "ConflictingOverrideError",
    "ResolutionCancelledError",
    "CompoundResolutionError",
    # OTel
    "emit_resolution_complete",
    "emit_resolution_failed",
]
