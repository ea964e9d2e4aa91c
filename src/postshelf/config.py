"""Configuration loaded from .postshelf.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".postshelf.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "postshelf" / "config.toml"


class ContentSectionConfig(BaseModel):
    """[content] section."""

    directory: str = "src/content/blog"
    extensions: list[str] = Field(default_factory=lambda: [".md", ".mdx"])
    recursive: bool = False
    strict: bool = True
    max_workers: int | None = None


class LoggingSectionConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            logger.warning("Unknown log level %r, using WARNING", value)
            return "WARNING"
        return level


class PostshelfConfig(BaseModel):
    """Top-level configuration."""

    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)
    logging: LoggingSectionConfig = Field(default_factory=LoggingSectionConfig)

    @property
    def content_dir(self) -> Path:
        return Path(self.content.directory).expanduser()


def load_config(path: str | Path | None = None) -> PostshelfConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .postshelf.toml in CWD
    3. ~/.config/postshelf/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged PostshelfConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    try:
        config = PostshelfConfig.model_validate(data) if data else PostshelfConfig()
    except ValidationError as exc:
        logger.warning("Invalid config, using defaults: %s", exc)
        config = PostshelfConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: PostshelfConfig, **cli_kwargs: object) -> PostshelfConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_dir": ("content", "directory"),
        "recursive": ("content", "recursive"),
        "strict": ("content", "strict"),
        "max_workers": ("content", "max_workers"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = str(value) if isinstance(value, Path) else value

    return PostshelfConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _parse_bool(raw: str) -> bool:
    return raw.lower() in ("true", "1", "yes")


def _apply_env_vars(config: PostshelfConfig) -> PostshelfConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    content_dir = os.environ.get("POSTSHELF_CONTENT_DIR")
    if content_dir is not None:
        data["content"]["directory"] = content_dir

    for env_var, field in [
        ("POSTSHELF_RECURSIVE", "recursive"),
        ("POSTSHELF_STRICT", "strict"),
    ]:
        raw = os.environ.get(env_var)
        if raw is not None:
            data["content"][field] = _parse_bool(raw)

    workers_raw = os.environ.get("POSTSHELF_MAX_WORKERS")
    if workers_raw:
        try:
            data["content"]["max_workers"] = int(workers_raw)
        except ValueError:
            logger.warning("Ignoring non-integer POSTSHELF_MAX_WORKERS=%r", workers_raw)

    level = os.environ.get("POSTSHELF_LOG_LEVEL")
    if level:
        data["logging"]["level"] = level.upper()

    return PostshelfConfig.model_validate(data)
