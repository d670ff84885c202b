"""
YAML configuration loading for observation data.

Loading precedence (highest to lowest):
1. Programmatic overrides
2. Environment variables (OBSDATA_*)
3. Config file (YAML)
4. Defaults from the Pydantic models

Both the nested layout (``analysis:`` / ``blocks:`` sections) and the flat
layout (uppercase analysis keys such as ``OBS_GLOBAL_STD_SCALING`` at the
top level next to ``blocks:``) are accepted.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from obsdata.core.exceptions import ConfigurationError

from .models import AnalysisConfig, ObservationDataConfig

ENV_PREFIX = "OBSDATA_"

ALIAS_MAP = {
    "GLOBAL_STD_SCALING": "OBS_GLOBAL_STD_SCALING",
    "STD_SCALING": "OBS_GLOBAL_STD_SCALING",
    "CENTRED_PERTURBATIONS": "OBS_CENTERED_PERTURBATIONS",
    "OBS_CENTRED_PERTURBATIONS": "OBS_CENTERED_PERTURBATIONS",
    "RANDOM_SEED": "OBS_RANDOM_SEED",
}

_ANALYSIS_ALIASES = {
    field.alias: name
    for name, field in AnalysisConfig.model_fields.items()
    if field.alias
}


def load_config(
    path: Path,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    use_env: bool = True,
) -> ObservationDataConfig:
    """
    Load and validate an observation data configuration.

    Args:
        path: Path to configuration YAML file
        overrides: Dictionary of programmatic overrides for analysis settings
        use_env: Whether to load OBSDATA_* environment variables (default: True)

    Returns:
        Validated ObservationDataConfig

    Raises:
        ConfigurationError: If configuration is invalid
        FileNotFoundError: If config file is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        try:
            file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(file_config).__name__}"
        )

    analysis, blocks = _split_sections(file_config)

    if use_env:
        analysis.update(_load_env_overrides())

    if overrides:
        analysis.update({_normalize_key(k): v for k, v in overrides.items()})

    raw = {"analysis": analysis, "blocks": blocks}
    try:
        return ObservationDataConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def _split_sections(file_config: Dict[str, Any]):
    """Separate analysis settings from block definitions."""
    analysis: Dict[str, Any] = {}
    blocks = []

    for key, value in file_config.items():
        lower = str(key).lower()
        if lower == "blocks":
            blocks = value or []
        elif lower == "analysis":
            for sub_key, sub_value in (value or {}).items():
                analysis[_normalize_key(sub_key)] = sub_value
        else:
            analysis[_normalize_key(key)] = value

    return analysis, blocks


def _load_env_overrides() -> Dict[str, Any]:
    """
    Load analysis overrides from environment variables.
    """
    env_overrides = {}

    for env_key, env_value in os.environ.items():
        if env_key.startswith(ENV_PREFIX):
            config_key = _normalize_key(env_key[len(ENV_PREFIX):])
            if config_key in _ANALYSIS_ALIASES:
                env_overrides[config_key] = _coerce_value(env_value)

    return env_overrides


def _normalize_key(key: str) -> str:
    """Map a field name or alias to its canonical uppercase alias."""
    key_upper = str(key).upper()
    if key_upper in ALIAS_MAP:
        return ALIAS_MAP[key_upper]
    if key_upper in _ANALYSIS_ALIASES:
        return key_upper
    # Accept pydantic field names (e.g. global_std_scaling)
    field = AnalysisConfig.model_fields.get(str(key).lower())
    if field is not None and field.alias:
        return field.alias
    return key_upper


def _coerce_value(value: Any) -> Any:
    """Coerce an environment string to bool, None, int or float where it parses."""
    if not isinstance(value, str):
        return value

    stripped = value.strip()
    lower = stripped.lower()

    if lower in ('true', 'yes'):
        return True
    if lower in ('false', 'no'):
        return False
    if lower in ('none', 'null', ''):
        return None

    try:
        if "." in stripped or "e" in lower:
            return float(stripped)
        return int(stripped)
    except ValueError:
        return stripped


def _format_validation_error(error: ValidationError) -> str:
    """
    Format a Pydantic ValidationError as a readable field list.

    Args:
        error: Pydantic ValidationError

    Returns:
        Formatted error message
    """
    error_lines = ["=" * 70]
    error_lines.append("Invalid observation data configuration")
    error_lines.append("=" * 70)

    for err in error.errors():
        location = ".".join(str(part) for part in err['loc']) or 'unknown'
        error_lines.append(f"  ✗ {location}: {err['msg']}")

    error_lines.append("=" * 70)
    return "\n".join(error_lines)
