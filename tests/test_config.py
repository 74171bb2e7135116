"""Tests for secrets-driven configuration."""

from __future__ import annotations

import importlib
import logging
from types import SimpleNamespace

config = importlib.import_module("lib.config")
defaults = importlib.import_module("lib.schema_defaults")


def test_settings_default_when_secrets_are_empty(monkeypatch) -> None:
    monkeypatch.setattr(config, "st", SimpleNamespace(secrets={}))

    settings = config.get_api_settings()

    assert settings["base_url"] == defaults.DEFAULT_API_BASE_URL
    assert settings["auth_url"] == f"{defaults.DEFAULT_API_BASE_URL}/Auth"
    assert settings["timeout"] == float(defaults.DEFAULT_API_TIMEOUT)
    assert settings["log_level"] == "INFO"


def test_api_table_takes_precedence_over_flat_keys(monkeypatch) -> None:
    secrets = {
        "api": {"base_url": "https://assess.example/api/", "timeout": "30", "log_level": "debug"},
        "api_base_url": "http://ignored",
        "api_auth_url": "https://auth.example/Auth/",
    }
    monkeypatch.setattr(config, "st", SimpleNamespace(secrets=secrets))

    settings = config.get_api_settings()

    assert settings == {
        "base_url": "https://assess.example/api",
        "auth_url": "https://auth.example/Auth",
        "timeout": 30.0,
        "log_level": "DEBUG",
    }


def test_missing_secrets_file_falls_back_to_defaults(monkeypatch) -> None:
    class MissingSecrets:
        def get(self, name, default=None):
            raise FileNotFoundError("secrets.toml")

    monkeypatch.setattr(config, "st", SimpleNamespace(secrets=MissingSecrets()))

    assert config.get_api_settings()["base_url"] == defaults.DEFAULT_API_BASE_URL


def test_setup_logging_configures_package_logger_once() -> None:
    logger = config.setup_logging("WARNING")
    handlers = list(logger.handlers)

    again = config.setup_logging("DEBUG")

    assert again is logger
    assert logger.name == "lib"
    assert logger.level == logging.DEBUG
    assert logger.handlers == handlers
