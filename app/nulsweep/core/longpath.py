"""Extended-length path helpers.

On Windows the ``\\\\?\\`` prefix hands a path to the filesystem driver
without Win32 name parsing, which is what makes reserved device names
reachable. Elsewhere the helpers fall back to the plain absolute path.
"""

import os

IS_WINDOWS = os.name == "nt"

EXTENDED_PREFIX = "\\\\?\\"
EXTENDED_UNC_PREFIX = "\\\\?\\UNC\\"


def to_extended_path(path: str) -> str:
    """Convert a path to its extended-length (bypass) form.

    Args:
        path: Absolute or relative path.

    Returns:
        ``\\\\?\\C:\\dir\\nul`` style path on Windows (``\\\\?\\UNC\\...`` for
        network shares), the absolute path on other platforms.
    """
    if not IS_WINDOWS:
        return os.path.abspath(path)

    if path.startswith(EXTENDED_PREFIX):
        return path

    absolute = os.path.abspath(path)
    if absolute.startswith("\\\\"):
        return EXTENDED_UNC_PREFIX + absolute[2:]
    return EXTENDED_PREFIX + absolute


def literal_exists(path: str) -> bool:
    """Check if something exists at the literal path.

    Uses the extended form so ``C:\\dir\\nul`` is not mistaken for the NUL
    device, and does not follow symlinks.

    Args:
        path: Path to check.

    Returns:
        True if a file, directory or link exists at the path.
    """
    return os.path.lexists(to_extended_path(path))
