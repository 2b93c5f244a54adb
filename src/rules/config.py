from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scan.files import DEFAULT_DUMP_SUFFIX

CONFIG_FILENAME = "cgraph.toml"

logger = logging.getLogger(__name__)


class CGraphConfig(BaseModel):
    """Configuration for building and querying the call graph."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".cgraph",
        description="Output directory for generated artifacts",
    )
    dump_suffix: str = Field(
        default=DEFAULT_DUMP_SUFFIX,
        description="Filename suffix of the GCC cgraph dumps to parse",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for dumps to include (empty = all dumps)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for dumps to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    jobs: int = Field(
        default=1,
        ge=1,
        description="Threads used to read dump files (parsing stays sequential)",
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Default symbol keys or name patterns skipped by queries",
    )

    @field_validator("dump_suffix")
    @classmethod
    def validate_dump_suffix(cls, v: str) -> str:
        if not v or "/" in v or "*" in v:
            msg = "dump_suffix must be a non-empty filename suffix such as '.cgraph'"
            raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the project root.

    The config output_dir must be a non-empty relative path that remains
    within the root after resolution. Absolute paths and paths that escape
    the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_dir.startswith("~") or output_path.is_absolute():
        msg = "output_dir must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> CGraphConfig:
    """Load configuration from cgraph.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return CGraphConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        config = CGraphConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e

    logger.debug("Loaded config from %s", config_path)
    return config
