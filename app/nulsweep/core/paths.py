"""Application directory management for nulsweep.

Follows the XDG Base Directory layout on POSIX systems and the usual
``%APPDATA%`` / ``%LOCALAPPDATA%`` locations on Windows.

Defaults:
- Config: ~/.config/nulsweep/ (Windows: %APPDATA%\\nulsweep\\)
- State: ~/.local/state/nulsweep/ (Windows: %LOCALAPPDATA%\\nulsweep\\)

``NULSWEEP_CONFIG_HOME`` and ``NULSWEEP_STATE_HOME`` override both.
"""

import os
from pathlib import Path

from nulsweep.core.longpath import IS_WINDOWS

# Application identifier for directory naming
APP_NAME = "nulsweep"


def _get_app_dir(override_var: str, xdg_var: str, default_subdir: str, windows_var: str) -> Path:
    """Resolve an application directory.

    Args:
        override_var: nulsweep-specific environment override (used as-is).
        xdg_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").
        windows_var: Windows environment variable holding the base directory.

    Returns:
        Path to the application-specific directory.
    """
    override = os.environ.get(override_var)
    if override:
        return Path(override)

    if IS_WINDOWS:
        base = os.environ.get(windows_var)
        if base:
            return Path(base) / APP_NAME

    base = os.environ.get(xdg_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return _get_app_dir("NULSWEEP_CONFIG_HOME", "XDG_CONFIG_HOME", ".config", "APPDATA")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the run history, which should persist between
    runs but is not configuration.
    """
    return _get_app_dir("NULSWEEP_STATE_HOME", "XDG_STATE_HOME", ".local/state", "LOCALAPPDATA")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to <config dir>/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to <config dir>/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
