"""Path validation for scan roots and deletion targets.

Paths end up as arguments of OS-level commands (bypass delete, recycle
bin), so anything carrying shell metacharacters is rejected up front.
"""

import logging
from collections.abc import Callable, Iterable

from nulsweep.core.longpath import literal_exists

logger = logging.getLogger(__name__)

FORBIDDEN_CHARACTERS: frozenset[str] = frozenset("&|;`$(){}[]<>")


class PathValidationError(Exception):
    """Base exception for rejected paths.

    Attributes:
        path: The rejected path.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class UnsafePathError(PathValidationError):
    """Raised when a path contains shell metacharacters."""


class PathNotFoundError(PathValidationError):
    """Raised when a path does not exist."""


class NoValidPathsError(Exception):
    """Raised when none of the requested scan roots passed validation."""


def find_forbidden_characters(path: str) -> list[str]:
    """Return the forbidden characters present in a path, in order of appearance."""
    seen: list[str] = []
    for char in path:
        if char in FORBIDDEN_CHARACTERS and char not in seen:
            seen.append(char)
    return seen


def validate_path(path: str) -> None:
    """Validate a path before it is scanned or deleted.

    Args:
        path: Absolute or relative filesystem path.

    Raises:
        UnsafePathError: If the path contains a forbidden character.
        PathNotFoundError: If nothing exists at the literal path.
    """
    forbidden = find_forbidden_characters(path)
    if forbidden:
        chars = " ".join(forbidden)
        raise UnsafePathError(path, f"Path contains forbidden characters ({chars}): {path}")

    if not literal_exists(path):
        raise PathNotFoundError(path, f"Path does not exist: {path}")


def resolve_scan_roots(
    paths: Iterable[str],
    on_invalid: Callable[[PathValidationError], None] | None = None,
) -> list[str]:
    """Filter scan roots down to the ones that pass validation.

    Invalid roots are skipped and reported through on_invalid, or logged
    as warnings when no callback is given. Duplicates are dropped while
    keeping the first occurrence.

    Args:
        paths: Candidate scan roots.
        on_invalid: Called with the error for each rejected root.

    Returns:
        Valid roots in their original order.

    Raises:
        NoValidPathsError: If no root survives validation.
    """
    valid: list[str] = []
    rejected: list[str] = []

    for path in paths:
        try:
            validate_path(path)
        except PathValidationError as e:
            if on_invalid is not None:
                on_invalid(e)
            else:
                logger.warning("Skipping scan path: %s", e)
            rejected.append(path)
            continue
        if path not in valid:
            valid.append(path)

    if not valid:
        detail = ", ".join(rejected) if rejected else "none given"
        raise NoValidPathsError(f"No valid paths to scan ({detail})")

    return valid
