"""
Configuration

Defaults live in the pydantic models below. A YAML file (config.yaml) can
override them, and environment variables (also read from .env) override
both. Values are type-checked when the tree is built; ranges are checked
by AppConfig.check_ranges().
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

NO_MATCH_POLICIES = ("silent", "feedback")
PROVIDERS = ("openai", "claude")

DEFAULT_CONFIG_PATH = "config.yaml"


class ConfigError(ValueError):
    """Invalid configuration value."""
    pass


class DisplayConfig(BaseModel):
    """Text wall layout and one-shot screen durations."""
    model_config = ConfigDict(extra="forbid")

    lines_per_screen: int = 6
    max_chars: Optional[int] = None
    welcome_duration_ms: int = 5000
    help_duration_ms: int = 8000
    status_duration_ms: int = 3000
    feedback_duration_ms: int = 3000


class PresentationConfig(BaseModel):
    """Auto-scroll behaviour."""
    model_config = ConfigDict(extra="forbid")

    auto_scroll_interval_ms: int = 8000
    suppress_stale_results: bool = True


class VoiceConfig(BaseModel):
    """Query extraction settings."""
    model_config = ConfigDict(extra="forbid")

    marker: str = "chat"
    prefixes: List[str] = Field(default_factory=lambda: ["who is "])
    on_no_match: str = "silent"


class GeneratorConfig(BaseModel):
    """Content provider settings."""
    model_config = ConfigDict(extra="forbid")

    provider: str = "openai"
    model: Optional[str] = None
    timeout_seconds: float = 15.0
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None


class ConnectionConfig(BaseModel):
    """Glasses relay WebSocket settings."""
    model_config = ConfigDict(extra="forbid")

    ws_url: Optional[str] = None
    reconnect_attempts: int = 5
    reconnect_delay_seconds: float = 1.0
    ping_interval_seconds: float = 30.0
    ping_timeout_seconds: float = 10.0


class AppConfig(BaseModel):
    """Full application configuration."""
    model_config = ConfigDict(extra="forbid")

    display: DisplayConfig = Field(default_factory=DisplayConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)

    def check_ranges(self) -> "AppConfig":
        """
        Check value ranges.

        Raises:
            ConfigError: On the first invalid value
        """
        if self.display.lines_per_screen < 1:
            raise ConfigError(f"lines_per_screen must be >= 1, got {self.display.lines_per_screen}")
        if self.display.max_chars is not None and self.display.max_chars < 10:
            raise ConfigError(f"max_chars must be >= 10, got {self.display.max_chars}")
        if self.presentation.auto_scroll_interval_ms <= 0:
            raise ConfigError(
                f"auto_scroll_interval_ms must be positive, got {self.presentation.auto_scroll_interval_ms}"
            )
        if self.voice.on_no_match not in NO_MATCH_POLICIES:
            raise ConfigError(
                f"on_no_match must be one of {NO_MATCH_POLICIES}, got {self.voice.on_no_match!r}"
            )
        if not self.voice.marker.strip():
            raise ConfigError("voice marker must not be blank")
        if self.generator.provider not in PROVIDERS:
            raise ConfigError(f"provider must be one of {PROVIDERS}, got {self.generator.provider!r}")
        if self.generator.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be positive, got {self.generator.timeout_seconds}")
        return self


# env var -> (section, field)
_ENV_OVERRIDES = {
    "OPENAI_API_KEY": ("generator", "openai_api_key"),
    "ANTHROPIC_API_KEY": ("generator", "anthropic_api_key"),
    "TALKING_POINTS_PROVIDER": ("generator", "provider"),
    "TALKING_POINTS_MODEL": ("generator", "model"),
    "GLASSES_WS_URL": ("connection", "ws_url"),
    "LINES_PER_SCREEN": ("display", "lines_per_screen"),
    "AUTO_SCROLL_INTERVAL_MS": ("presentation", "auto_scroll_interval_ms"),
    "NO_MATCH_POLICY": ("voice", "on_no_match"),
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    # An empty section ("display:" with nothing under it) means defaults
    return {name: values for name, values in data.items() if values is not None}


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    where = ".".join(str(part) for part in first["loc"])
    return f"{where}: {first['msg']} (got {first.get('input')!r})"


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None
) -> AppConfig:
    """
    Build the application config.

    Args:
        path: YAML file. None tries config.yaml in the working directory.
        env: Environment mapping (defaults to os.environ after load_dotenv)

    Returns:
        Validated AppConfig

    Raises:
        ConfigError: Unknown keys, wrongly typed or out-of-range values,
            or an unreadable explicit file
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    raw: Dict[str, Any] = {}

    config_path = Path(path) if path else Path(DEFAULT_CONFIG_PATH)
    if config_path.exists():
        raw = _load_yaml(config_path)
        logger.info(f"Loaded config from {config_path}")
    elif path:
        raise ConfigError(f"Config file not found: {config_path}")

    for var, (section, key) in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        values = raw.setdefault(section, {})
        if not isinstance(values, dict):
            raise ConfigError(f"Config section {section} must be a mapping")
        values[key] = value

    try:
        config = AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {_describe(e)}") from e

    return config.check_ranges()
