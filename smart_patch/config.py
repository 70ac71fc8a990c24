"""
Configuration — loads settings from .smartpatch.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "max_changed_lines": 400,
    "fuzzy_threshold": 0.7,
    "log_dir": ".smartpatch/logs",
    "metrics": True,
    "diff_preview": True,
}

# Config file search locations
_CONFIG_FILENAMES = [".smartpatch.yaml", ".smartpatch.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Patch engine configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .smartpatch.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.MAX_CHANGED_LINES = _get("SMART_PATCH_MAX_CHANGED_LINES",
                                      "max_changed_lines",
                                      _DEFAULTS["max_changed_lines"], cast=int)
        self.FUZZY_THRESHOLD = _get("SMART_PATCH_FUZZY_THRESHOLD",
                                    "fuzzy_threshold",
                                    _DEFAULTS["fuzzy_threshold"], cast=float)
        self.LOG_DIR = _get("SMART_PATCH_LOG_DIR", "log_dir",
                            _DEFAULTS["log_dir"])
        self.METRICS_ENABLED = _get_bool("SMART_PATCH_METRICS", "metrics",
                                         _DEFAULTS["metrics"])
        self.DIFF_PREVIEW = _get_bool("SMART_PATCH_DIFF_PREVIEW",
                                      "diff_preview",
                                      _DEFAULTS["diff_preview"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
