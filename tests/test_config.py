"""
Tests for RegistryConfig and the global config accessors.
"""

import pytest
from pydantic import ValidationError

from semconv_registry.config import RegistryConfig, get_config, get_log_level, reset_config


class TestDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SEMCONV_REGISTRY_SERVICE_NAME", raising=False)
        config = RegistryConfig()
        assert config.service_name == "semconv-registry"
        assert config.max_workers == 1
        assert config.fail_fast is False
        assert config.check_override_examples is True
        assert config.other_family == "other"
        assert config.declared_namespaces is None
        assert config.log_format == "json"

    def test_test_env_applied(self):
        assert RegistryConfig().service_name == "semconv-registry-test"


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SEMCONV_REGISTRY_MAX_WORKERS", "8")
        monkeypatch.setenv("SEMCONV_REGISTRY_FAIL_FAST", "true")
        config = RegistryConfig()
        assert config.max_workers == 8
        assert config.fail_fast is True

    def test_declared_namespaces_from_json(self, monkeypatch):
        monkeypatch.setenv("SEMCONV_REGISTRY_DECLARED_NAMESPACES", '["db", " http ", ""]')
        assert RegistryConfig().declared_namespaces == ["db", "http"]

    def test_constructor_beats_env(self, monkeypatch):
        monkeypatch.setenv("SEMCONV_REGISTRY_MAX_WORKERS", "8")
        assert RegistryConfig(max_workers=2).max_workers == 2


class TestValidation:
    def test_max_workers_at_least_one(self):
        with pytest.raises(ValidationError):
            RegistryConfig(max_workers=0)

    def test_log_level_choices(self):
        with pytest.raises(ValidationError):
            RegistryConfig(log_level="verbose")


class TestGlobalConfig:
    def test_singleton(self):
        assert get_config() is get_config()

    def test_overrides_replace_singleton(self):
        config = get_config(log_level="debug")
        assert config.log_level == "debug"
        assert get_config() is config
        assert get_log_level() == "debug"

    def test_reset(self):
        first = get_config()
        reset_config()
        assert get_config() is not first
