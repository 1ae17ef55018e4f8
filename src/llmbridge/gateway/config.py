"""Provider and managed-mode configuration.

The configuration store is a JSON file shared with the desktop UI, so
models keep its camelCase keys as aliases while exposing snake_case
attributes. This module only reads provider entries for transformers;
`save_config` exists for tooling that edits the file.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".ccb" / "managed-mode-config.json"
DEFAULT_PORT = 8487

ProviderType = Literal["anthropic", "openrouter", "deepseek", "gemini", "custom"]
LogLevel = Literal["debug", "info", "warn", "error"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class ProviderConfig(_CamelModel):
    """One upstream API provider as stored by the configuration UI.

    Timeouts and retry delays are in milliseconds.
    """

    id: str = ""
    name: str = ""
    type: ProviderType | str = "custom"
    api_base_url: str = ""
    api_key: str = ""
    models: list[str] = Field(default_factory=list)
    transformer: str | None = None
    enabled: bool = True
    description: str | None = None
    created_at: int | None = None
    updated_at: int | None = None
    timeout: int | None = None
    max_retries: int | None = None
    retry_delay: int | None = None


class RouterConfig(_CamelModel):
    """Model routing preferences per task category."""

    default: str | None = None
    background: str | None = None
    think: str | None = None
    long_context: str | None = None
    long_context_threshold: int | None = None
    web_search: str | None = None


class LoggingSettings(_CamelModel):
    enabled: bool = True
    level: LogLevel = "info"


class ManagedModeConfig(_CamelModel):
    """Top-level managed-mode configuration file."""

    enabled: bool = True
    port: int = DEFAULT_PORT
    current_provider: str = ""
    providers: list[ProviderConfig] = Field(default_factory=list)
    router: RouterConfig | None = None
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def current(self) -> ProviderConfig | None:
        """Return the provider selected by `current_provider`, if any."""
        for provider in self.providers:
            if provider.id == self.current_provider:
                return provider
        return None

    def provider(self, provider_id: str) -> ProviderConfig | None:
        """Look up a provider by id."""
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None


def _find_project_root() -> Path | None:
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


@lru_cache(maxsize=1)
def _load_env() -> None:
    """Load .env.local from the project root once, if present."""
    from dotenv import load_dotenv

    project_root = _find_project_root()
    if project_root:
        env_local = project_root / ".env.local"
        if env_local.exists():
            load_dotenv(env_local)


def config_path(path: str | Path | None = None) -> Path:
    """Resolve the configuration file path.

    Explicit path wins, then LLMBRIDGE_CONFIG, then ~/.ccb/managed-mode-config.json.
    """
    if path is not None:
        return Path(path).expanduser()
    _load_env()
    env_path = os.environ.get("LLMBRIDGE_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> ManagedModeConfig:
    """Load the managed-mode configuration.

    A missing, unreadable or invalid file yields the default configuration
    and a warning; it never raises.
    """
    target = config_path(path)
    try:
        data: Any = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Config load failed for %s: %s, using defaults", target, e)
        return ManagedModeConfig()

    if not isinstance(data, dict):
        logger.warning("Config %s is not a JSON object, using defaults", target)
        return ManagedModeConfig()

    # Merge logging defaults field by field
    raw_logging = data.get("logging")
    data["logging"] = {
        **LoggingSettings().model_dump(),
        **(raw_logging if isinstance(raw_logging, dict) else {}),
    }

    try:
        return ManagedModeConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Config %s is invalid: %s, using defaults", target, e)
        return ManagedModeConfig()


def save_config(config: ManagedModeConfig, path: str | Path | None = None) -> Path:
    """Write the configuration as pretty JSON with camelCase keys."""
    target = config_path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = config.model_dump(by_alias=True, exclude_none=True)
        target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        logger.error("Config save failed for %s: %s", target, e)
        raise
    return target
