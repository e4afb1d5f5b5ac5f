"""
Pytest configuration and fixtures for semconv-registry tests.
"""

from __future__ import annotations

import os
from typing import Dict, Generator

import pytest

from semconv_registry.config import reset_config
from semconv_registry.resolver.loader import RegistryLoader


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def test_env() -> Dict[str, str]:
    """Test environment variables."""
    return {
        "SEMCONV_REGISTRY_SERVICE_NAME": "semconv-registry-test",
    }


@pytest.fixture(autouse=True)
def set_test_env(test_env: Dict[str, str]) -> Generator[None, None, None]:
    """Set test environment variables and isolate config/loader state."""
    original = {}
    for key, value in test_env.items():
        original[key] = os.environ.get(key)
        os.environ[key] = value
    reset_config()
    RegistryLoader.clear_cache()

    yield

    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    reset_config()
    RegistryLoader.clear_cache()


# ============================================================================
# Registry Fixtures
# ============================================================================


@pytest.fixture
def db_registry_groups() -> list[dict]:
    """A small database registry: attribute catalog, spans and an extends chain."""
    return [
        {
            "id": "registry.db",
            "type": "attribute_group",
            "prefix": "db",
            "brief": "Database attributes",
            "attributes": [
                {
                    "id": "system",
                    "type": {
                        "members": [
                            {"id": "cassandra", "value": "cassandra"},
                            {"id": "mongodb", "value": "mongodb"},
                        ]
                    },
                    "requirement_level": "required",
                    "brief": "The database management system.",
                    "stability": "stable",
                },
                {
                    "id": "statement",
                    "type": "string",
                    "requirement_level": "recommended",
                    "brief": "The database statement.",
                    "examples": ["SELECT * FROM wuser_table"],
                },
                {
                    "id": "cassandra.table",
                    "type": "string",
                    "requirement_level": "recommended",
                    "brief": "The name of the Cassandra table.",
                    "tag": "tech-specific-cassandra",
                },
                {
                    "id": "cassandra.consistency_level",
                    "type": "string",
                    "requirement_level": "opt_in",
                },
                {
                    "id": "mongodb.collection",
                    "type": "string",
                    "requirement_level": "required",
                },
            ],
        },
        {
            "id": "db",
            "type": "span",
            "span_kind": "client",
            "brief": "Database client calls.",
            "attributes": [
                {"ref": "db.system"},
                {"ref": "db.statement", "requirement_level": "opt_in"},
            ],
        },
        {
            "id": "db.cassandra",
            "type": "span",
            "extends": "db",
            "brief": "Cassandra calls.",
            "attributes": [
                {"ref": "db.cassandra.table"},
                {"ref": "db.statement", "tag": "call-level-tech-specific-cassandra"},
            ],
        },
        {
            "id": "db.mongodb",
            "type": "span",
            "extends": "db",
            "attributes": [{"ref": "db.mongodb.collection"}],
        },
    ]
