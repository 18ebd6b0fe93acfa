"""Recycle Bin diversion.

The Shell recycle API goes through Win32 path parsing and usually cannot
handle reserved names at all, so this is strictly best-effort: callers
treat any failure as "fall back to the bypass delete".
"""

import logging
import subprocess
from typing import Protocol

from nulsweep.core.longpath import IS_WINDOWS
from nulsweep.utils.shell import command_exists, powershell_quote, run_command

logger = logging.getLogger(__name__)


class RecycleBin(Protocol):
    """Moves files to the Recycle Bin."""

    def send(self, path: str) -> bool:
        """Try to recycle the file at path, returning True on success."""
        ...


class PowerShellRecycleBin:
    """Recycles files through ``Microsoft.VisualBasic.FileIO.FileSystem``.

    Attributes:
        _timeout: Seconds to wait for PowerShell.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def is_available(self) -> bool:
        """Check if PowerShell is available on a Windows host."""
        return IS_WINDOWS and command_exists("powershell")

    def send(self, path: str) -> bool:
        """Send a file to the Recycle Bin.

        Args:
            path: Path of the file to recycle.

        Returns:
            True if PowerShell reported success, False otherwise.
        """
        if not self.is_available():
            logger.debug("Recycle Bin not available on this platform")
            return False

        script = (
            "Add-Type -AssemblyName Microsoft.VisualBasic; "
            "[Microsoft.VisualBasic.FileIO.FileSystem]::DeleteFile("
            f"{powershell_quote(path)}, 'OnlyErrorDialogs', 'SendToRecycleBin')"
        )
        try:
            result = run_command(
                ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
                timeout=self._timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
            logger.debug("Recycle Bin call failed for %s: %s", path, e)
            return False

        if not result.success:
            logger.debug("Recycle Bin refused %s: %s", path, result.output)
        return result.success
