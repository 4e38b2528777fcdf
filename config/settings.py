"""
config/settings.py — Configuration contract for check_cdap.

Uses pydantic-settings to validate and type-check the probe options. Every
CLI flag has a CHECK_CDAP_* environment fallback.

Two usage modes:
  Probe / CLI:
      cfg = load_settings()                               # os.environ only
      cfg = load_settings("/etc/nagios/cdap.env", {...})  # env file + CLI overrides

  Tests (isolated — no env file, no os.environ bleed):
      cfg = Settings(URI="http://cdap:11015", FLOWS="App.Flow")
"""
from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

ENV_PREFIX = "CHECK_CDAP_"


class Settings(BaseSettings):
    # Settings() reads kwargs only. load_settings() is the entry point that
    # merges the env file, os.environ and CLI values into those kwargs.
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=None,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)

    # -------------------------------------------------------------------------
    # Endpoint
    # -------------------------------------------------------------------------
    URI: str = "http://localhost:11015"
    NAMESPACE: str = "default"
    TIMEOUT: int = 30
    TOKEN: Optional[str] = None
    INSECURE: bool = False

    # -------------------------------------------------------------------------
    # Programs to check: comma-separated App.Program lists
    # -------------------------------------------------------------------------
    FLOWS: str = ""
    MAPREDUCES: str = ""
    SERVICES: str = ""
    SPARKS: str = ""
    WORKFLOWS: str = ""
    WORKERS: str = ""

    VERBOSE: bool = False

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator(
        "URI",
        "NAMESPACE",
        "TOKEN",
        "FLOWS",
        "MAPREDUCES",
        "SERVICES",
        "SPARKS",
        "WORKFLOWS",
        "WORKERS",
        mode="before",
    )
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("URI")
    @classmethod
    def validate_uri(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError(f"must be an http(s) URL with a host, got '{v}'")
        return v.rstrip("/")

    @field_validator("NAMESPACE")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1 second")
        return v

    @field_validator("TOKEN")
    @classmethod
    def empty_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


def _read_env_file(env_file: str) -> dict[str, str]:
    values: dict[str, str] = {}
    with open(env_file, encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            k, _, v = line.partition("=")
            k = k.strip()
            v = re.sub(r"\s+#.*$", "", v.strip()).strip("'\"")
            if k:
                values[k] = v
    return values


def load_settings(
    env_file: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """Build Settings from an env file, os.environ and CLI overrides.

    Precedence (highest first): overrides, os.environ, env file, defaults.
    Only CHECK_CDAP_* keys are read from the file and the environment, and
    empty values there count as unset. Override keys are bare field names
    and None values are ignored.

    Raises:
        OSError: if env_file is given but cannot be read.
        ValidationError: if any value fails validation.
    """
    sources = [_read_env_file(env_file)] if env_file else []
    sources.append(dict(os.environ))  # os.environ wins over the file

    known: dict[str, Any] = {}
    for source in sources:
        for key, value in source.items():
            field = key[len(ENV_PREFIX):] if key.startswith(ENV_PREFIX) else None
            # Exported-but-empty variables do not mask a lower source or the default.
            if field in Settings.model_fields and value.strip():
                known[field] = value

    for field, value in (overrides or {}).items():
        if value is not None and field in Settings.model_fields:
            known[field] = value
    return Settings(**known)
