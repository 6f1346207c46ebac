"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

SERVER_NAME = "n8n-workflow-builder"
SERVER_VERSION = "0.1.0"

DEFAULT_HOST = "http://localhost:5678"
DEFAULT_NODE_CACHE_TTL = 60 * 60
DEFAULT_REQUEST_TIMEOUT = 30.0

VERBOSITY_LEVELS = ("concise", "full")


@dataclass
class Settings:
    """Connection and output settings for the server."""

    n8n_host: str = DEFAULT_HOST
    n8n_api_key: str = ""
    log_level: str = "info"
    output_verbosity: str = "concise"
    node_cache_ttl: float = DEFAULT_NODE_CACHE_TTL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    node_catalog_path: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            n8n_host=env.get("N8N_HOST") or DEFAULT_HOST,
            n8n_api_key=env.get("N8N_API_KEY", ""),
            log_level=env.get("LOG_LEVEL") or "info",
            output_verbosity=env.get("OUTPUT_VERBOSITY") or "concise",
            node_cache_ttl=_float_env(env, "NODE_CACHE_TTL", DEFAULT_NODE_CACHE_TTL),
            request_timeout=_float_env(env, "N8N_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            node_catalog_path=env.get("NODE_CATALOG_PATH") or None,
        )


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
