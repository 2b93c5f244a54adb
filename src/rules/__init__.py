"""Configuration and name-pattern rules."""

from rules.config import (
    CGraphConfig,
    ConfigError,
    load_config,
    resolve_output_dir,
)
from rules.patterns import (
    PatternError,
    compile_pattern,
    compile_patterns,
    is_ignored,
    matches_any,
)

__all__ = [
    "CGraphConfig",
    "ConfigError",
    "PatternError",
    "compile_pattern",
    "compile_patterns",
    "is_ignored",
    "load_config",
    "matches_any",
    "resolve_output_dir",
]
