"""Export of found files as CSV or JSON."""

import csv
import io
import json
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Any

from nulsweep.sweeper.models import FoundFile

CSV_FIELDS: tuple[str, ...] = ("name", "path", "size", "modified", "read_only", "attributes")


class ExportFormat(str, Enum):
    """File formats for exported scan results."""

    CSV = "csv"
    JSON = "json"


def files_to_records(files: Sequence[FoundFile]) -> list[dict[str, Any]]:
    """Convert found files to flat export records."""
    return [f.to_dict() for f in files]


def detect_format(path: Path) -> ExportFormat:
    """Pick the export format from a file extension (CSV unless .json)."""
    return ExportFormat.JSON if path.suffix.lower() == ".json" else ExportFormat.CSV


def export_files(
    files: Sequence[FoundFile],
    path: Path,
    export_format: ExportFormat | None = None,
) -> Path:
    """Write found files to a CSV or JSON file.

    Args:
        files: Files to export.
        path: Destination file; parent directories are created.
        export_format: Format to write. Derived from the extension when None.

    Returns:
        Resolved path of the written file.

    Raises:
        IsADirectoryError: If path is an existing directory.
        OSError: If the file cannot be written.
    """
    path = path.resolve()
    if path.is_dir():
        raise IsADirectoryError(f"Export path is a directory: {path}")

    fmt = export_format or detect_format(path)
    records = files_to_records(files)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == ExportFormat.JSON:
        path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        return path

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(CSV_FIELDS))
        writer.writeheader()
        writer.writerows(records)
    return path


def render_csv(files: Sequence[FoundFile]) -> str:
    """Render found files as CSV text (for stdout)."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(CSV_FIELDS), lineterminator="\n")
    writer.writeheader()
    writer.writerows(files_to_records(files))
    return buffer.getvalue()
