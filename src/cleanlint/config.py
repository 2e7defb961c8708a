"""
cleanlint - Configuration.

Runtime configuration, YAML config file loading and environment overrides.
For rule and pattern definitions, see patterns.py.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .patterns import (
    DEFAULT_ALLOWED_NUMBERS,
    DEFAULT_ALLOWED_SHORT_NAMES,
    DOC_EXTS,
    RULES,
    SEVERITIES,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".cleanlint.yaml"

# Default configuration file locations (checked after explicit path and env)
USER_CONFIG_PATH = Path.home() / ".cleanlint" / "config.yaml"

# Environment variable -> (config key, converter)
ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "CLEANLINT_MAX_PARAMS": ("max_params", int),
    "CLEANLINT_MAX_NESTING": ("max_nesting", int),
    "CLEANLINT_MAX_FUNCTION_LINES": ("max_function_lines", int),
    "CLEANLINT_LOG_DIR": ("log_dir", Path),
}


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""


@dataclass
class LintConfig:
    """Runtime configuration for cleanlint."""

    root: Path

    # File extensions
    python_exts: tuple[str, ...] = (".py",)
    docs_exts: tuple[str, ...] = DOC_EXTS

    # Directory exclusions
    exclude_dirs: tuple[str, ...] = (
        ".git",
        ".venv",
        "venv",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
        "node_modules",
        "dist",
        "build",
    )

    # Explicit file list (disables directory walk)
    explicit_files: Optional[tuple[Path, ...]] = None

    # Thresholds
    max_params: int = 3
    max_nesting: int = 3
    max_function_lines: int = 20
    min_name_length: int = 2
    max_methods: int = 20
    cohesion_min_methods: int = 4

    # Allowlists
    allowed_numbers: tuple[float, ...] = DEFAULT_ALLOWED_NUMBERS
    allowed_short_names: tuple[str, ...] = DEFAULT_ALLOWED_SHORT_NAMES

    # Rule selection
    select: frozenset[str] = frozenset()
    ignore: frozenset[str] = frozenset()
    severity: dict[str, str] = field(default_factory=dict)

    # Feature toggles
    check_docs: bool = True

    # Output settings
    json_output: bool = False
    errors_only: bool = False
    strict: bool = False

    # Watch mode
    log_dir: Path = Path.home() / ".cleanlint" / "logs"

    def is_enabled(self, rule_id: str) -> bool:
        """Check whether a rule is selected and not ignored."""
        if self.select and rule_id not in self.select:
            return False
        return rule_id not in self.ignore

    def severity_for(self, rule_id: str) -> str:
        """Effective severity for a rule (override or catalogue default)."""
        return self.severity.get(rule_id) or RULES[rule_id][0]

    def validate(self) -> None:
        """Raise ConfigError on out-of-range thresholds or unknown rule ids."""
        for name in (
            "max_params",
            "max_nesting",
            "max_function_lines",
            "min_name_length",
            "max_methods",
            "cohesion_min_methods",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")

        unknown = (set(self.select) | set(self.ignore) | set(self.severity)) - set(RULES)
        if unknown:
            raise ConfigError(f"Unknown rule id(s): {', '.join(sorted(unknown))}")

        bad_sev = {s for s in self.severity.values() if s not in SEVERITIES}
        if bad_sev:
            raise ConfigError(
                f"Unknown severity value(s): {', '.join(sorted(bad_sev))} "
                f"(expected one of {', '.join(SEVERITIES)})"
            )


def should_exclude_path(cfg: LintConfig, path: Path) -> bool:
    """Check if path should be excluded from scanning."""
    return any(d in path.parts for d in cfg.exclude_dirs)


def parse_rule_list(value: Any) -> frozenset[str]:
    """Accept 'A,B' strings or lists of ids; return upper-cased ids."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v) for v in value]
    else:
        raise ConfigError(f"Expected a rule list, got {value!r}")
    return frozenset(i.strip().upper() for i in items if i.strip())


def _find_config_file(root: Path, explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path is not None:
        if not explicit_path.is_file():
            raise ConfigError(f"Config file not found: {explicit_path}")
        return explicit_path

    env_path = os.environ.get("CLEANLINT_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            raise ConfigError(f"CLEANLINT_CONFIG points to a missing file: {p}")
        return p

    for candidate in (root / CONFIG_FILENAME, USER_CONFIG_PATH):
        if candidate.is_file():
            return candidate
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw YAML/env value to the LintConfig field type."""
    if key in ("select", "ignore"):
        return parse_rule_list(value)
    if key == "severity":
        if not isinstance(value, dict):
            raise ConfigError("severity must be a mapping of rule id -> severity")
        return {str(k).upper(): str(v).upper() for k, v in value.items()}
    if key in ("allowed_numbers", "allowed_short_names", "exclude_dirs", "python_exts", "docs_exts"):
        if not isinstance(value, (list, tuple)):
            raise ConfigError(f"{key} must be a list")
        return tuple(value)
    if key in ("root", "log_dir"):
        return Path(value).expanduser()
    return value


def load_config(
    root: Path,
    config_path: Optional[Path] = None,
    **overrides: Any,
) -> LintConfig:
    """
    Build a LintConfig for root.

    Precedence (lowest to highest): defaults, YAML file, environment
    variables, keyword overrides (CLI). None-valued overrides are ignored.
    """
    known = {f.name for f in fields(LintConfig)}
    values: dict[str, Any] = {}

    path = _find_config_file(root, config_path)
    if path is not None:
        raw = _read_yaml(path)
        unknown = set(raw) - known - {"root"}
        if unknown:
            raise ConfigError(f"Unknown config key(s) in {path}: {', '.join(sorted(unknown))}")
        for key, value in raw.items():
            if key != "root":
                values[key] = _coerce(key, value)
        logger.debug("Loaded config from %s", path)

    for env_var, (key, conv) in ENV_OVERRIDES.items():
        if env_var in os.environ:
            try:
                values[key] = conv(os.environ[env_var])
            except ValueError as e:
                raise ConfigError(f"{env_var}: {e}") from e

    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"Unknown config option: {key}")
        if value is not None:
            values[key] = _coerce(key, value)

    cfg = replace(LintConfig(root=root), **values)
    cfg.validate()
    return cfg
