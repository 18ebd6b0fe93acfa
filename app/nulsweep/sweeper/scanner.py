"""Scanner for files named after reserved Windows device names.

Walks one or more roots, counting every regular file it sees and yielding
a FoundFile for each reserved-name file outside the excluded paths.
"""

import logging
import os
import stat
import string
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from pathlib import Path

from nulsweep.core.longpath import IS_WINDOWS, literal_exists, to_extended_path
from nulsweep.core.reserved import is_reserved_name
from nulsweep.sweeper.models import FoundFile
from nulsweep.sweeper.session import ScanSession

logger = logging.getLogger(__name__)

# Windows file attribute flags, in display order
_ATTRIBUTE_FLAGS: tuple[tuple[int, str], ...] = (
    (0x1, "ReadOnly"),
    (0x2, "Hidden"),
    (0x4, "System"),
    (0x20, "Archive"),
    (0x100, "Temporary"),
    (0x400, "ReparsePoint"),
    (0x800, "Compressed"),
    (0x1000, "Offline"),
    (0x2000, "NotContentIndexed"),
    (0x4000, "Encrypted"),
)

_FILE_ATTRIBUTE_READONLY = 0x1
_DRIVE_FIXED = 3


class ReservedFileScanner:
    """Finds reserved-name files below a set of roots.

    Args:
        exclude: Substrings; any path containing one is ignored
            (case-insensitive).
        max_depth: Deepest directory level to descend into. Files directly
            inside a root are at depth 0. None or 0 means unlimited.
    """

    def __init__(
        self,
        *,
        exclude: Iterable[str] = (),
        max_depth: int | None = None,
    ) -> None:
        if max_depth is not None and max_depth < 0:
            msg = f"Max depth cannot be negative, got {max_depth}"
            raise ValueError(msg)
        self._exclude = tuple(p.lower() for p in exclude if p)
        self._max_depth = max_depth or None

    def scan(
        self,
        roots: Iterable[str],
        session: ScanSession | None = None,
    ) -> Iterator[FoundFile]:
        """Scan all roots and yield reserved-name files.

        Roots that do not exist are skipped with a warning. Unreadable
        subdirectories are reported and skipped; scanning continues.

        Args:
            roots: Directories to scan; a file root is checked on its own.
            session: Session whose scan counters are updated. A throwaway
                session is used when omitted.

        Yields:
            FoundFile for each reserved-name file found.
        """
        counters = session if session is not None else ScanSession()

        for root in roots:
            if not literal_exists(root):
                logger.warning("Scan path does not exist: %s", root)
                continue
            if self._is_excluded(os.path.abspath(root)):
                logger.info("Scan path is excluded: %s", root)
                continue
            if not os.path.isdir(to_extended_path(root)):
                yield from self._scan_file(os.path.abspath(root), counters)
                continue
            yield from self._scan_directory(Path(os.path.abspath(root)), 0, counters)

    def _is_excluded(self, path: str) -> bool:
        lowered = path.lower()
        return any(pattern in lowered for pattern in self._exclude)

    def _within_depth(self, depth: int) -> bool:
        return self._max_depth is None or depth <= self._max_depth

    def _scan_directory(
        self,
        directory: Path,
        depth: int,
        session: ScanSession,
    ) -> Iterator[FoundFile]:
        """Scan one directory level and recurse into subdirectories.

        Args:
            directory: Directory to list.
            depth: Depth of the files in this directory.
            session: Session receiving scan counters.

        Yields:
            FoundFile for each match at this level or below.
        """
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", directory, e)
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                logger.warning("Cannot determine type of %s: %s", entry.path, e)
                continue

            if is_dir:
                if self._within_depth(depth + 1) and not self._is_excluded(entry.path):
                    yield from self._scan_directory(Path(entry.path), depth + 1, session)
                continue

            if not is_file:
                continue

            yield from self._scan_file(entry.path, session)

    def _scan_file(self, path: str, session: ScanSession) -> Iterator[FoundFile]:
        """Check one regular file, yielding it if it carries a reserved name."""
        session.files_scanned += 1

        if not is_reserved_name(os.path.basename(path)):
            return

        if self._is_excluded(path):
            logger.debug("Excluded: %s", path)
            return

        found = build_found_file(path)
        if found is None:
            return

        session.files_found += 1
        logger.debug("Found reserved-name file: %s", found.full_path)
        yield found


def build_found_file(path: str) -> FoundFile | None:
    """Build a FoundFile snapshot for a path.

    Stats through the extended-length form so reserved names resolve to
    the file on disk rather than the device.

    Args:
        path: Absolute path of the file.

    Returns:
        FoundFile, or None if the file could not be stat'ed.
    """
    try:
        st = os.stat(to_extended_path(path), follow_symlinks=False)
    except OSError as e:
        logger.warning("Cannot read file information for %s: %s", path, e)
        return None

    is_read_only, attributes = _describe_attributes(st)
    absolute = os.path.abspath(path)
    return FoundFile(
        name=os.path.basename(absolute),
        full_path=absolute,
        directory=os.path.dirname(absolute),
        size_bytes=st.st_size,
        last_modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        is_read_only=is_read_only,
        attributes=attributes,
    )


def _describe_attributes(st: os.stat_result) -> tuple[bool, str]:
    """Derive the read-only flag and attribute names from a stat result.

    Windows reports ``st_file_attributes``; elsewhere a file without the
    owner write bit counts as read-only.
    """
    file_attributes: int | None = getattr(st, "st_file_attributes", None)
    if file_attributes is not None:
        names = [label for flag, label in _ATTRIBUTE_FLAGS if file_attributes & flag]
        return bool(file_attributes & _FILE_ATTRIBUTE_READONLY), ", ".join(names) or "Normal"

    read_only = not (st.st_mode & stat.S_IWUSR)
    return read_only, "ReadOnly" if read_only else "Normal"


def default_scan_roots() -> list[str]:
    """Get the roots scanned when none are given.

    Returns:
        All fixed local drives on Windows (e.g., ["C:\\\\", "D:\\\\"]),
        the current working directory elsewhere.
    """
    if not IS_WINDOWS:
        return [os.getcwd()]

    import ctypes

    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    bitmask = kernel32.GetLogicalDrives()
    roots: list[str] = []
    for index, letter in enumerate(string.ascii_uppercase):
        if not bitmask & (1 << index):
            continue
        root = f"{letter}:\\"
        if kernel32.GetDriveTypeW(root) == _DRIVE_FIXED:
            roots.append(root)
    return roots
