"""
Settings loader for review_service (settings.yaml).

Usage:
    from review_service.settings import get_settings

    settings = get_settings()
    level = settings.logging.level
    mode = settings.get_nested("evaluation.mode", "all")
"""

import os
import sys
import yaml
from pathlib import Path
from typing import List, Any


# Settings file location (REVIEW_SERVICE_SETTINGS overrides it)
SETTINGS_FILE = Path(__file__).parent / "settings.yaml"
SETTINGS_ENV_VAR = "REVIEW_SERVICE_SETTINGS"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
EVALUATION_MODES = ("all", "short_circuit")

# Defaults (used when a value is missing from the YAML file)
DEFAULTS = {
    "logging": {
        "level": "INFO",
    },
    "evaluation": {
        # "all": every condition runs concurrently, no short-circuit
        # "short_circuit": sequential, stops at the first unsatisfied condition
        "mode": "all",
    },
    # Optional declarative policy, see conditions.builder.policy_from_config
    "policy": {},
}


class DotDict(dict):
    """Dictionary with attribute access: d.key instead of d['key']"""

    def __getattr__(self, key: str) -> Any:
        try:
            value = self[key]
            if isinstance(value, dict):
                return DotDict(value)
            return value
        except KeyError:
            raise AttributeError(f"Setting '{key}' not found")

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def get_nested(self, path: str, default: Any = None) -> Any:
        """Get a value by dotted path: 'logging.level'"""
        keys = path.split('.')
        value = self
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge of two dicts (override wins)"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        elif isinstance(value, dict):
            result[key] = _deep_merge({}, value)
        else:
            result[key] = value
    return result


def resolve_settings_path() -> Path:
    """Settings file path, honoring the REVIEW_SERVICE_SETTINGS variable."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override)
    return SETTINGS_FILE


def load_settings(filepath: Path = None) -> DotDict:
    """
    Load settings from a YAML file.

    Priority:
    1. Values from the YAML file (highest)
    2. DEFAULTS

    Args:
        filepath: Path to the settings file (defaults to resolve_settings_path())

    Returns:
        DotDict with the merged settings
    """
    filepath = filepath or resolve_settings_path()

    # Start from a deep copy of the defaults
    config = _deep_merge({}, DEFAULTS)

    if filepath.exists():
        with open(filepath, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        config = _deep_merge(config, yaml_config)

    return DotDict(config)


def validate_settings(settings: DotDict) -> List[str]:
    """
    Validate settings.

    Returns:
        List of errors (empty if everything is fine)
    """
    errors = []

    level = str(settings.get_nested("logging.level", "")).upper()
    if level not in LOG_LEVELS:
        errors.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

    mode = settings.get_nested("evaluation.mode")
    if mode not in EVALUATION_MODES:
        errors.append(f"evaluation.mode must be one of {', '.join(EVALUATION_MODES)}")

    policy = settings.get_nested("policy", {})
    if policy is None:
        policy = {}
    if not isinstance(policy, dict):
        errors.append("policy must be a mapping")
    else:
        # Imported lazily: the builder module does not depend on settings
        from review_service.conditions.builder import policy_from_config
        from review_service.errors import InvalidPolicyConfigError
        try:
            policy_from_config(policy)
        except InvalidPolicyConfigError as e:
            errors.append(str(e))

    return errors


# Global settings instance (lazy)
_settings = None


def get_settings() -> DotDict:
    """Get global settings (singleton)"""
    global _settings
    if _settings is None:
        _settings = load_settings()
        errors = validate_settings(_settings)
        if errors:
            print("[review_service] Invalid settings:", file=sys.stderr)
            for err in errors:
                print(f"  - {err}", file=sys.stderr)
    return _settings


def reload_settings() -> DotDict:
    """Reload settings from file"""
    global _settings
    _settings = None
    return get_settings()
