"""
YAML loader for semantic convention registry documents.

Each document has a ``groups:`` list.  Every group loaded from a file is
stamped with that file as ``provenance``, which shows up in error
locations and in the resolved lineage.  Parsed documents are cached per
resolved path for the life of the process; ``RegistryLoader.clear_cache()``
resets it.  Loading is a pre-step: the resolver itself performs no I/O.

Usage::

    from pathlib import Path
    from semconv_registry.resolver.loader import RegistryLoader

    loader = RegistryLoader()
    groups = loader.load_directory(Path("model/"))
    registry = resolve_registry(groups)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, ClassVar, Optional, Union

import yaml

from semconv_registry.resolver.schema import GroupSpec, RegistryDocument

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _parse_document(stream: Union[str, IO[str]], origin: str) -> RegistryDocument:
    raw = yaml.safe_load(stream)
    if not isinstance(raw, dict):
        raise TypeError(
            f"Registry document {origin} must have a mapping with 'groups' at its root, "
            f"got {type(raw).__name__}"
        )
    return RegistryDocument.model_validate(raw)


class RegistryLoader:
    """Loads registry documents from YAML files, strings or directory trees."""

    _documents: ClassVar[dict[str, RegistryDocument]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Forget every parsed document (used by tests)."""
        cls._documents.clear()

    def load(self, path: Path) -> RegistryDocument:
        """Load one registry file, stamping its groups with *path*.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the YAML root is not a mapping.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If a group record is malformed.
        """
        key = str(path.resolve())
        document = self._documents.get(key)
        if document is not None:
            logger.debug("Registry document cache hit: %s", key)
            return document

        if not path.is_file():
            raise FileNotFoundError(f"Registry document not found: {path}")

        with open(path, encoding="utf-8") as fh:
            document = _parse_document(fh, str(path)).with_provenance(str(path))

        self._documents[key] = document
        logger.debug("Loaded registry document: path=%s, groups=%d", key, len(document.groups))
        return document

    def load_from_string(self, yaml_str: str, source: Optional[str] = None) -> RegistryDocument:
        """Parse a registry document held in memory.

        Groups are stamped with *source* when given; nothing is cached.
        """
        document = _parse_document(yaml_str, source or "<string>")
        if source is not None:
            document = document.with_provenance(source)
        return document

    def load_directory(self, root: Path) -> list[GroupSpec]:
        """Load every YAML document under *root*, recursively.

        Files are read in sorted path order so the returned group list is
        stable across runs.

        Raises:
            NotADirectoryError: If *root* is not a directory.
        """
        if not root.is_dir():
            raise NotADirectoryError(f"Registry directory not found: {root}")

        paths = sorted(p for p in root.rglob("*") if p.suffix in YAML_SUFFIXES and p.is_file())
        groups: list[GroupSpec] = []
        for path in paths:
            groups.extend(self.load(path).groups)

        logger.debug(
            "Loaded registry directory: root=%s, files=%d, groups=%d",
            root,
            len(paths),
            len(groups),
        )
        return groups
