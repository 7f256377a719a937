"""Layered TOML configuration for posture.

``config/default.toml`` is the base layer and ``config/{POSTURE_ENV}.toml``
overrides it key by key. Every file may only use the sections the
``Settings`` model declares, so a typo such as ``[engien]`` fails loudly
instead of silently falling back to defaults.

When the engine is used as a library outside a checkout and no config
directory can be found, configuration is empty and model defaults apply.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from posture.config.settings import Settings
from posture.exceptions import ConfigError

CONFIG_DIR_ENV = "POSTURE_CONFIG_DIR"
ENVIRONMENT_ENV = "POSTURE_ENV"
DEFAULT_FILE = "default.toml"

# How many directories above the working directory to search for config/
_SEARCH_DEPTH = 5


def known_sections() -> frozenset[str]:
    """Top-level keys a config file may define."""
    return frozenset(Settings.model_fields)


def get_config_dir() -> Path | None:
    """Locate the configuration directory.

    POSTURE_CONFIG_DIR wins and must exist. Otherwise the working directory
    and its parents are searched for a ``config/`` holding ``default.toml``.

    Returns:
        The directory, or ``None`` when nothing was found

    Raises:
        ConfigError: If POSTURE_CONFIG_DIR points at a missing directory
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise ConfigError(f"{CONFIG_DIR_ENV} is not a directory: {explicit}")
        return path

    current = Path.cwd()
    for _ in range(_SEARCH_DEPTH):
        candidate = current / "config"
        if (candidate / DEFAULT_FILE).is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent

    return None


def get_environment() -> str:
    """Current environment name from POSTURE_ENV, ``development`` by default."""
    return os.environ.get(ENVIRONMENT_ENV, "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one config file and check its top-level sections.

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or defines
            sections ``Settings`` does not know
    """
    try:
        with file_path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{file_path}: invalid TOML: {e}") from e

    validate_sections(data, source=str(file_path))
    return data


def validate_sections(config: dict[str, Any], *, source: str = "config") -> None:
    """Reject top-level keys that no ``Settings`` field consumes.

    Nested sections (``engine``, ``observability``) must be tables.
    """
    allowed = known_sections()
    unknown = sorted(set(config) - allowed)
    if unknown:
        raise ConfigError(
            f"{source}: unknown configuration section(s) {', '.join(unknown)}; "
            f"expected one of {', '.join(sorted(allowed))}"
        )

    for name in ("engine", "observability"):
        if name in config and not isinstance(config[name], dict):
            raise ConfigError(f"{source}: [{name}] must be a table")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Tables merge recursively; scalars and arrays replace. Inputs are not
    modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Merge the default and environment config files.

    Returns:
        The merged configuration, empty when no config directory exists

    Raises:
        ConfigError: If an explicit config directory lacks ``default.toml``
            or any file fails to load
    """
    config_dir = get_config_dir()
    if config_dir is None:
        return {}

    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise ConfigError(
            f"{default_path} not found; create it or point {CONFIG_DIR_ENV} elsewhere"
        )

    config = load_toml(default_path)

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.is_file():
        config = deep_merge(config, load_toml(env_path))

    return config
