"""
Settings for hosting programs that configure devlog from the environment.

The handler itself never reads the environment; ``configure_logging`` uses
these settings when the caller does not pass explicit values.
"""
from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import IO, Any, Dict, List, Literal, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[no-redef]

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .handler import HandlerOptions
from .levels import level_name, parse_level
from .theme import theme_with_overrides


class DevLogSettings(BaseSettings):
    """Handler settings loaded from env or a TOML file."""

    model_config = SettingsConfigDict(
        env_prefix="DEVLOG_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    level: str = "INFO"
    add_source: bool = False
    prefix: str = ""
    stream: Literal["stdout", "stderr"] = "stderr"
    theme: Dict[str, Dict[str, int]] = {}

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            return level_name(value)
        return level_name(parse_level(str(value)))

    @field_validator("theme")
    @classmethod
    def _lowercase_categories(cls, value: Dict[str, Dict[str, int]]) -> Dict[str, Dict[str, int]]:
        return {category.lower(): codes for category, codes in value.items()}

    def to_options(self) -> HandlerOptions:
        theme = theme_with_overrides(self.theme) if self.theme else None
        return HandlerOptions(
            level=parse_level(self.level),
            add_source=self.add_source,
            prefix=self.prefix,
            theme=theme,
        )

    def output_stream(self) -> IO[str]:
        return sys.stdout if self.stream == "stdout" else sys.stderr


_CONFIG_ENV_VAR = "DEVLOG_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("devlog.toml")


def _config_candidates(path: Optional[Path] = None) -> List[Path]:
    candidates: List[Path] = []
    if path is not None:
        candidates.append(path)
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)
    return candidates


def _load_toml_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the first TOML file that exists."""
    for candidate in _config_candidates(path):
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate TOML sections into DevLogSettings keyword arguments."""
    data: Dict[str, Any] = {}

    handler = raw.get("handler", {})
    for key in ("level", "add_source", "prefix", "stream"):
        if key in handler:
            data[key] = handler[key]

    theme = raw.get("theme", {})
    if theme:
        data["theme"] = {
            category: {code: section[code] for code in ("fg", "bg") if code in section}
            for category, section in theme.items()
        }

    return data


def load_settings(path: Optional[Path] = None) -> DevLogSettings:
    """
    Build settings from a TOML file plus ``DEVLOG_*`` environment variables.

    Values present in the file are passed as constructor arguments and so
    take precedence over the environment.
    """
    raw = _load_toml_config(path)
    return DevLogSettings(**_flatten_config(raw))


@lru_cache(maxsize=1)
def get_settings() -> DevLogSettings:
    """Return process-wide settings, loading them on first use."""
    return load_settings()
