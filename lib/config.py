"""Runtime configuration read from Streamlit secrets."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

import streamlit as st

from lib.schema_defaults import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT

PACKAGE_LOGGER_NAME = __name__.split(".")[0]
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _secrets_dict(name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in Streamlit secrets."""

    try:
        value = st.secrets.get(name, {})  # type: ignore[arg-type]
    except FileNotFoundError:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _secret(name: str, default: Any = None) -> Any:
    try:
        return st.secrets.get(name, default)
    except FileNotFoundError:
        return default


def get_api_settings() -> Dict[str, Any]:
    """Return backend connection settings with defaults applied.

    Values come from the ``[api]`` secrets table, falling back to the flat
    ``api_base_url``/``api_auth_url``/``api_timeout``/``log_level`` keys.
    """

    secrets = _secrets_dict("api")
    base_url = secrets.get("base_url") or _secret("api_base_url") or DEFAULT_API_BASE_URL
    auth_url = secrets.get("auth_url") or _secret("api_auth_url")
    timeout = secrets.get("timeout") or _secret("api_timeout") or DEFAULT_API_TIMEOUT
    log_level = secrets.get("log_level") or _secret("log_level") or "INFO"

    base_url = str(base_url).rstrip("/")
    return {
        "base_url": base_url,
        "auth_url": str(auth_url or f"{base_url}/Auth").rstrip("/"),
        "timeout": float(timeout),
        "log_level": str(log_level).upper(),
    }


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the application logger once and return it."""

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    resolved = level or get_api_settings()["log_level"]
    logger.setLevel(getattr(logging, resolved, logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger


__all__ = ["get_api_settings", "setup_logging"]
