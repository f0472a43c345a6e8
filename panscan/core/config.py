"""Configuration management for panscan.

Loads configuration from config.yaml, with support for CLI overrides
and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field


# Public resolvers queried when authority discovery fails
FALLBACK_RESOLVERS: List[str] = [
    "8.8.8.8:53",
    "119.29.29.29:53",
    "223.5.5.5:53",
    "223.6.6.6:53",
    "114.114.114.114:53",
]


class GeneralConfig(BaseModel):
    """General runtime configuration."""

    verbose: bool = False
    log_file: Optional[str] = None


class DNSConfig(BaseModel):
    """DNS resolver and authority discovery configuration."""

    # Bootstrap resolvers used for NS discovery and nameserver address lookups
    resolvers: List[str] = ["8.8.8.8", "8.8.4.4", "1.1.1.1"]
    timeout: int = 5
    port: int = 53
    ns_lookup_attempts: int = Field(default=3, ge=1)
    fallback_resolvers: List[str] = Field(default_factory=lambda: list(FALLBACK_RESOLVERS))


class WildcardConfig(BaseModel):
    """Wildcard probing and classification configuration."""

    queries_per_server: int = Field(default=5, ge=1)
    ttl_round: int = Field(default=60, ge=1)


class Config(BaseModel):
    """Top-level panscan configuration."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    dns: DNSConfig = Field(default_factory=DNSConfig)
    wildcard: WildcardConfig = Field(default_factory=WildcardConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from a YAML file, applying environment variable overrides.

    Args:
        config_path: Optional path to a YAML configuration file. Defaults to
                     ``config.yaml`` in the current working directory.

    Returns:
        Populated :class:`Config` instance.
    """
    path = Path(config_path) if config_path else Path("config.yaml")

    raw: Dict[str, Any] = {}
    if path.exists():
        with path.open("r") as fh:
            raw = yaml.safe_load(fh) or {}

    # Environment variable overrides (PANSCAN__SECTION__KEY=value)
    _apply_env_overrides(raw)

    return Config(**raw)


def _apply_env_overrides(raw: Dict[str, Any]) -> None:
    """Mutate *raw* in-place with values from environment variables.

    Environment variables follow the pattern ``PANSCAN__<SECTION>__<KEY>``.
    For example ``PANSCAN__DNS__TIMEOUT=3``.
    """
    prefix = "PANSCAN__"
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(prefix):
            continue
        parts = env_key[len(prefix):].lower().split("__")
        if len(parts) == 2:
            section, key = parts
            raw.setdefault(section, {})[key] = env_val
