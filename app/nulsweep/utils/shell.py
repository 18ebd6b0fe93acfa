"""Shell execution utilities.

Provides subprocess execution with captured output, PowerShell quoting,
and the elevation helpers used on Windows.
"""

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass

from nulsweep.core.longpath import IS_WINDOWS


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stripped stderr and stdout, stderr first."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(name) is not None


def powershell_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def is_elevated() -> bool:
    """Check if the current process runs with administrator/root rights."""
    if IS_WINDOWS:
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except OSError:
            return False
    return os.geteuid() == 0


def relaunch_elevated(args: list[str]) -> int | None:
    """Relaunch nulsweep with administrator rights through a UAC prompt.

    Starts ``python -m nulsweep <args>`` via ``Start-Process -Verb RunAs``,
    waits for it and writes its exit code to stdout. Declining the prompt
    makes Start-Process fail, which ends the script with a non-zero code
    and no output.

    Args:
        args: Command-line arguments for the elevated process.

    Returns:
        Exit code of the elevated process, or None if the prompt was
        declined or elevation is not supported on this platform.
    """
    if not IS_WINDOWS:
        return None

    arg_list = ",".join(powershell_quote(a) for a in ["-m", "nulsweep", *args])
    script = (
        "try { "
        f"$p = Start-Process -FilePath {powershell_quote(sys.executable)} "
        f"-ArgumentList @({arg_list}) -Verb RunAs -Wait -PassThru -ErrorAction Stop "
        "} catch { exit 1 }; "
        "Write-Output $p.ExitCode"
    )
    try:
        result = run_command(
            ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
            timeout=None,
        )
    except (FileNotFoundError, OSError):
        return None
    if not result.success:
        return None

    lines = result.stdout.strip().splitlines()
    try:
        return int(lines[-1])
    except (IndexError, ValueError):
        return None
