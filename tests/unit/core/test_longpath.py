"""Unit tests for extended-length path helpers."""

import os
from pathlib import Path
from unittest.mock import patch

from nulsweep.core import longpath
from nulsweep.core.longpath import literal_exists, to_extended_path


class TestToExtendedPath:
    """Tests for to_extended_path function."""

    def test_posix_returns_absolute_path(self, tmp_path: Path) -> None:
        """Outside Windows the absolute path is returned unchanged."""
        with patch.object(longpath, "IS_WINDOWS", False):
            result = to_extended_path(str(tmp_path / "nul"))

        assert result == os.path.abspath(str(tmp_path / "nul"))

    def test_windows_drive_path(self) -> None:
        """Drive paths get the \\\\?\\ prefix."""
        with (
            patch.object(longpath, "IS_WINDOWS", True),
            patch("nulsweep.core.longpath.os.path.abspath", side_effect=lambda p: p),
        ):
            result = to_extended_path("C:\\proj\\nul")

        assert result == "\\\\?\\C:\\proj\\nul"

    def test_windows_unc_path(self) -> None:
        """UNC paths get the \\\\?\\UNC\\ prefix."""
        with (
            patch.object(longpath, "IS_WINDOWS", True),
            patch("nulsweep.core.longpath.os.path.abspath", side_effect=lambda p: p),
        ):
            result = to_extended_path("\\\\server\\share\\nul")

        assert result == "\\\\?\\UNC\\server\\share\\nul"

    def test_windows_already_extended(self) -> None:
        """Paths already in extended form are not prefixed twice."""
        with patch.object(longpath, "IS_WINDOWS", True):
            result = to_extended_path("\\\\?\\C:\\proj\\nul")

        assert result == "\\\\?\\C:\\proj\\nul"


class TestLiteralExists:
    """Tests for literal_exists function."""

    def test_existing_file(self, tmp_path: Path) -> None:
        """A file named nul is found on disk."""
        target = tmp_path / "nul"
        target.write_text("x")

        assert literal_exists(str(target)) is True

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing paths are reported as absent."""
        assert literal_exists(str(tmp_path / "missing")) is False

    def test_directory(self, tmp_path: Path) -> None:
        """Directories count as existing."""
        assert literal_exists(str(tmp_path)) is True
