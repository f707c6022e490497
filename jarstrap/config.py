"""
Settings loader for jarstrap.

Supports loading from:
1. Built-in defaults
2. YAML settings file (jarstrap.config.yaml, or the file named by JARSTRAP_CONFIG)
3. Environment variables (.env.local or the process environment)

Environment variables (checked in order, first valid value wins):
- Toolchain home: JARSTRAP_HOME
- Maven version: JARSTRAP_MAVEN_VERSION
- Maven download URL: JARSTRAP_MAVEN_URL
- Bundled Maven archive: JARSTRAP_MAVEN_ARCHIVE
- Log level: JARSTRAP_LOG_LEVEL

Usage:
    from jarstrap.config import get_settings

    settings = get_settings()
    print(settings["toolchain"]["maven_version"])
"""

import copy
import logging
import os
from functools import lru_cache
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "jarstrap.config.yaml"
CONFIG_ENV_VAR = "JARSTRAP_CONFIG"
HOME_ENV_VAR = "JARSTRAP_HOME"

# values copied from example files, never real settings
PLACEHOLDER_VALUES = {"changeme", "placeholder"}

DEFAULT_SETTINGS = {
    "toolchain": {
        "maven_version": "3.9.9",
        # "download" fetches the archive, "bundled" extracts a local one
        "mode": "download",
        "download_url": (
            "https://archive.apache.org/dist/maven/maven-3/{version}/binaries/"
            "apache-maven-{version}-bin.zip"
        ),
        "archive": None,
        "home": None,
    },
    "logging": {
        "level": "INFO",
    },
}

# Environment variable aliases per settings key.
# Order matters: first valid value found wins
ENV_VAR_ALIASES = {
    "toolchain.home": [HOME_ENV_VAR],
    "toolchain.maven_version": ["JARSTRAP_MAVEN_VERSION"],
    "toolchain.download_url": ["JARSTRAP_MAVEN_URL"],
    "toolchain.archive": ["JARSTRAP_MAVEN_ARCHIVE"],
    "logging.level": ["JARSTRAP_LOG_LEVEL"],
}


def _load_env_file():
    """Load environment variables from .env.local if it exists."""
    env_file = Path.cwd() / ".env.local"
    if not env_file.exists():
        return
    with open(env_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Remove quotes if present
                if value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                elif value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]
                os.environ.setdefault(key, value)


def _is_placeholder(value):
    """Check if a value is a placeholder that should be ignored."""
    if not value:
        return True
    return value.strip().lower() in PLACEHOLDER_VALUES


def _get_env_with_aliases(key_path):
    """
    Get an environment variable value, checking all aliases of a settings key.
    Returns (value, var_name) tuple or (None, None) if not found.
    """
    for var_name in ENV_VAR_ALIASES.get(key_path, []):
        value = os.getenv(var_name)
        if value and not _is_placeholder(value):
            return value, var_name
    return None, None


def _settings_file():
    """Return the YAML settings file to use, or None."""
    explicit = os.getenv(CONFIG_ENV_VAR)
    if explicit and not _is_placeholder(explicit):
        return Path(explicit)
    candidate = Path.cwd() / DEFAULT_CONFIG_FILE
    if candidate.exists():
        return candidate
    return None


def _merge(base, overlay):
    """Recursively merge overlay into base (overlay wins)."""
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_settings_file(path):
    """
    Load a YAML settings file.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file does not contain a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    return data


@lru_cache(maxsize=1)
def get_settings():
    """
    Get the full settings dictionary.
    Merges defaults, the YAML settings file and environment variables
    (env vars take precedence).
    """
    _load_env_file()
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    path = _settings_file()
    if path is not None:
        logger.debug(f"Loading settings from {path}")
        _merge(settings, load_settings_file(path))

    for key_path in ENV_VAR_ALIASES:
        value, var_name = _get_env_with_aliases(key_path)
        if value is None:
            continue
        logger.debug(f"Setting {key_path} from {var_name}")
        parts = key_path.split(".")
        obj = settings
        for part in parts[:-1]:
            obj = obj.setdefault(part, {})
        obj[parts[-1]] = value

    return settings


def clear_settings_cache():
    """Forget the cached settings, so the next access reloads them."""
    get_settings.cache_clear()


def get_toolchain_settings():
    """Get the toolchain section of the settings."""
    return dict(get_settings().get("toolchain", {}))


def get_log_level():
    """Get the configured log level as a logging constant."""
    level = str(get_settings().get("logging", {}).get("level", "INFO"))
    return getattr(logging, level.upper(), logging.INFO)
