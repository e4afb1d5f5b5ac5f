"""
semconv-registry - Resolution engine for semantic convention registries.

Takes the raw groups of a semantic convention registry (reusable
attribute groups plus spans, events, metrics, resources, scopes and
entities that reference and extend them) and produces one immutable,
fully resolved registry for code generators, documentation renderers and
compatibility checks.

Key Features:
- Attribute catalog with duplicate-key detection
- Reference resolution with per-field overrides and lineage
- ``extends`` inheritance with override-in-place merge and cycle detection
- Deterministic namespace families for presentation order

Example usage:
    from pathlib import Path
    from semconv_registry import RegistryLoader, resolve_registry

    groups = RegistryLoader().load_directory(Path("model/"))
    registry = resolve_registry(groups)
    registry.attribute("db.system").requirement_level
"""

__version__ = "0.1.0"
__all__ = [
    "RegistryLoader",
    "RegistryResolver",
    "ResolvedRegistry",
    "resolve_registry",
    "get_config",
    "__version__",
]


# Lazy imports to avoid loading pydantic-settings and OTel at import time
def __getattr__(name: str):
    if name == "RegistryLoader":
        from semconv_registry.resolver.loader import RegistryLoader
        return RegistryLoader
    if name == "RegistryResolver":
        from semconv_registry.resolver.registry import RegistryResolver
        return RegistryResolver
    if name == "ResolvedRegistry":
        from semconv_registry.resolver.registry import ResolvedRegistry
        return ResolvedRegistry
    if name == "resolve_registry":
        from semconv_registry.resolver.registry import resolve_registry
        return resolve_registry
    if name == "get_config":
        from semconv_registry.config import get_config
        return get_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
