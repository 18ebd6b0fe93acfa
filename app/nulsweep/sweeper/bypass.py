"""Reserved-name bypass deletion.

The only place that knows how to delete a file whose name Windows refuses
to handle. Everything else in the engine talks to the ``BypassDeleter``
protocol, so tests can substitute a fake.
"""

import errno
import logging
import os
import stat
import subprocess
from enum import Enum
from typing import Protocol

from nulsweep.core.longpath import to_extended_path
from nulsweep.sweeper.models import DeletionOutcome, DeletionStatus
from nulsweep.utils.shell import run_command

logger = logging.getLogger(__name__)

# Native Windows error codes
ERROR_ACCESS_DENIED = 5
ERROR_SHARING_VIOLATION = 32
ERROR_LOCK_VIOLATION = 33

_LOCKED_WINERRORS = frozenset({ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION})
_LOCKED_ERRNOS = frozenset({errno.EBUSY, errno.ETXTBSY})
_DENIED_ERRNOS = frozenset({errno.EACCES, errno.EPERM})

_LOCKED_MARKERS = (
    "being used by another process",
    "used by another process",
    "locked",
    "sharing violation",
)
_DENIED_MARKERS = (
    "access is denied",
    "access denied",
    "access to the path",
    "permission denied",
)

ELEVATION_HINT = "Run nulsweep from an elevated (Administrator) prompt or pass --elevate."


class BypassDeleter(Protocol):
    """Deletes a file while bypassing reserved-name interception."""

    def force_delete(self, path: str, *, force_read_only: bool) -> DeletionOutcome:
        """Delete the file at path, returning deleted/locked/access_denied/failed."""
        ...


def classify_error_text(text: str) -> DeletionStatus:
    """Classify a delete failure from its message text.

    Text matching depends on the OS language and version, so it is only
    used where no native error code is available.

    Args:
        text: Error output of the failed delete.

    Returns:
        LOCKED, ACCESS_DENIED or FAILED.
    """
    lowered = text.lower()
    if any(marker in lowered for marker in _LOCKED_MARKERS):
        return DeletionStatus.LOCKED
    if any(marker in lowered for marker in _DENIED_MARKERS):
        return DeletionStatus.ACCESS_DENIED
    return DeletionStatus.FAILED


def classify_os_error(exc: OSError) -> DeletionStatus:
    """Classify a delete failure from the native error code.

    Checks ``winerror`` first (Windows), then ``errno``, then falls back to
    the message text.

    Args:
        exc: The error raised by the delete call.

    Returns:
        LOCKED, ACCESS_DENIED or FAILED.
    """
    winerror = getattr(exc, "winerror", None)
    if winerror is not None:
        if winerror in _LOCKED_WINERRORS:
            return DeletionStatus.LOCKED
        if winerror == ERROR_ACCESS_DENIED:
            return DeletionStatus.ACCESS_DENIED
        return classify_error_text(str(exc))

    if exc.errno in _LOCKED_ERRNOS:
        return DeletionStatus.LOCKED
    if exc.errno in _DENIED_ERRNOS:
        return DeletionStatus.ACCESS_DENIED
    return classify_error_text(str(exc))


def _failure(status: DeletionStatus, message: str) -> DeletionOutcome:
    if status == DeletionStatus.ACCESS_DENIED:
        message = f"{message}. {ELEVATION_HINT}"
    return DeletionOutcome(status=status, error=message)


class NativeBypassDeleter:
    """Deletes through ``os.remove`` on the extended-length path.

    Errors carry native codes, so classification does not depend on
    message text.
    """

    def force_delete(self, path: str, *, force_read_only: bool) -> DeletionOutcome:
        """Delete a file via its extended-length path.

        Args:
            path: Path of the file to delete.
            force_read_only: Clear the read-only attribute before deleting.

        Returns:
            DeletionOutcome with status DELETED, LOCKED, ACCESS_DENIED or FAILED.
        """
        target = to_extended_path(path)
        try:
            if force_read_only:
                os.chmod(target, stat.S_IREAD | stat.S_IWRITE)
            os.remove(target)
        except OSError as e:
            status = classify_os_error(e)
            logger.debug("Bypass delete of %s failed (%s): %s", path, status.value, e)
            return _failure(status, str(e))

        return DeletionOutcome(status=DeletionStatus.DELETED)


class CommandBypassDeleter:
    """Deletes through ``cmd /c del`` on the extended-length path.

    ``del`` reports failures as text only and often exits 0 regardless,
    so the engine's post-delete existence check is what catches silent
    failures here.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def force_delete(self, path: str, *, force_read_only: bool) -> DeletionOutcome:
        """Delete a file with ``del /q`` (plus ``/f`` for read-only files).

        Args:
            path: Path of the file to delete.
            force_read_only: Pass ``/f`` so read-only files are deleted.

        Returns:
            DeletionOutcome with status DELETED, LOCKED, ACCESS_DENIED or FAILED.
        """
        args = ["cmd", "/c", "del", "/q"]
        if force_read_only:
            args.append("/f")
        args.append(to_extended_path(path))

        try:
            result = run_command(args, timeout=self._timeout)
        except subprocess.TimeoutExpired:
            return DeletionOutcome(
                status=DeletionStatus.FAILED,
                error=f"Delete command timed out after {self._timeout:.0f}s",
            )
        except (FileNotFoundError, OSError) as e:
            return DeletionOutcome(status=DeletionStatus.FAILED, error=str(e))

        output = result.output
        if result.success and not output:
            return DeletionOutcome(status=DeletionStatus.DELETED)

        status = classify_error_text(output)
        if result.success and status == DeletionStatus.FAILED:
            # del prints informational lines on success for some inputs
            return DeletionOutcome(status=DeletionStatus.DELETED)
        return _failure(status, output or f"del exited with code {result.returncode}")


class BypassMethod(str, Enum):
    """How the bypass delete reaches the file."""

    NATIVE = "native"
    COMMAND = "command"


def create_bypass_deleter(method: BypassMethod) -> BypassDeleter:
    """Create the bypass deleter for a configured method.

    Args:
        method: NATIVE for ``os.remove`` on the extended path, COMMAND for
            ``cmd /c del`` with text-based error classification.

    Returns:
        A BypassDeleter implementation.
    """
    if method == BypassMethod.COMMAND:
        return CommandBypassDeleter()
    return NativeBypassDeleter()
