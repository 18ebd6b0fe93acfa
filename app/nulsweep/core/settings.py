"""Persistent settings for nulsweep.

Settings live in a TOML file (``<config dir>/config.toml``). Every value
has a default, so a missing file is not an error; command-line flags
override whatever the file says.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nulsweep.core.paths import get_settings_path
from nulsweep.sweeper.bypass import BypassMethod
from nulsweep.sweeper.models import MAX_RETRY_COUNT, DeletionOptions

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE: tuple[str, ...] = ("$Recycle.Bin", "System Volume Information")


class SweepSettings(BaseModel):
    """Settings for scanning and deletion.

    Attributes:
        roots: Scan roots used when none are given on the command line
            (empty = all fixed drives on Windows, current directory elsewhere).
        exclude: Path substrings to skip while scanning.
        max_depth: Deepest directory level to scan (None or 0 = unlimited).
        retry_count: Extra delete attempts for locked files (0-10).
        retry_delay_seconds: Wait between attempts for locked files (1-60).
        use_recycle_bin: Try the Recycle Bin before the bypass delete.
        bypass_method: native (os.remove) or command (cmd del) bypass delete.
        backup_dir: Copy each file here before removing it.
        record_history: Append each clean run to the history file.
        watch_interval_seconds: Poll interval for watch mode.
    """

    model_config = ConfigDict(extra="forbid")

    roots: Annotated[
        list[str],
        Field(description="Default scan roots"),
    ] = []
    exclude: Annotated[
        list[str],
        Field(description="Path substrings excluded from scanning"),
    ] = list(DEFAULT_EXCLUDE)
    max_depth: Annotated[
        int | None,
        Field(ge=0, description="Maximum scan depth (None or 0 = unlimited)"),
    ] = None
    retry_count: Annotated[
        int,
        Field(ge=0, le=MAX_RETRY_COUNT, description="Retries for locked files (0-10)"),
    ] = 0
    retry_delay_seconds: Annotated[
        int,
        Field(ge=1, le=60, description="Delay between retries in seconds (1-60)"),
    ] = 2
    use_recycle_bin: Annotated[
        bool,
        Field(description="Try the Recycle Bin before deleting"),
    ] = False
    bypass_method: Annotated[
        BypassMethod,
        Field(description="Bypass delete method (native or command)"),
    ] = BypassMethod.NATIVE
    backup_dir: Annotated[
        Path | None,
        Field(description="Backup directory (None = no backup)"),
    ] = None
    record_history: Annotated[
        bool,
        Field(description="Record clean runs in the history file"),
    ] = True
    watch_interval_seconds: Annotated[
        int,
        Field(ge=1, le=3600, description="Watch mode poll interval in seconds"),
    ] = 5

    def deletion_options(self) -> DeletionOptions:
        """Build engine options from these settings."""
        return DeletionOptions(
            retry_count=self.retry_count,
            retry_delay_seconds=float(self.retry_delay_seconds),
            use_recycle_bin=self.use_recycle_bin,
            backup_dir=self.backup_dir,
        )


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsParseError(SettingsError):
    """Raised when the settings file is not valid TOML."""


def load_settings(path: Path | None = None) -> SweepSettings:
    """Load settings from a TOML file.

    Args:
        path: Settings file. If None, uses the default settings path.

    Returns:
        Validated SweepSettings; defaults if the file does not exist.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the file cannot be read or fails validation.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return SweepSettings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return SweepSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: SweepSettings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written to a temporary file first and moved into place
    with os.replace().

    Args:
        settings: Settings to save.
        path: Destination. If None, uses the default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def settings_to_dict(settings: SweepSettings) -> dict[str, Any]:
    """Convert settings to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are left out.
    """
    data = settings.model_dump(mode="json")
    return {key: value for key, value in data.items() if value is not None}
