"""Unit tests for the reserved-name file scanner."""

import logging
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from nulsweep.sweeper import scanner as scanner_module
from nulsweep.sweeper.scanner import (
    ReservedFileScanner,
    _describe_attributes,
    build_found_file,
    default_scan_roots,
)
from nulsweep.sweeper.session import ScanSession


class TestScannerInit:
    """Tests for ReservedFileScanner construction."""

    def test_negative_depth_rejected(self) -> None:
        """A negative max_depth raises ValueError."""
        with pytest.raises(ValueError, match="Max depth cannot be negative"):
            ReservedFileScanner(max_depth=-1)

    def test_exclusion_is_case_insensitive(self, tmp_path: Path) -> None:
        """Exclusion patterns match regardless of case."""
        (tmp_path / "NODE_MODULES" / "pkg").mkdir(parents=True)
        (tmp_path / "NODE_MODULES" / "pkg" / "nul").write_text("")
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "nul").write_text("")

        found = list(ReservedFileScanner(exclude=["Node_Modules"]).scan([str(tmp_path)]))

        assert [Path(f.full_path).parent.name for f in found] == ["lib"]

    def test_empty_patterns_ignored(self, reserved_tree: Path) -> None:
        """Empty strings do not exclude everything."""
        found = list(ReservedFileScanner(exclude=[""]).scan([str(reserved_tree)]))

        assert len(found) == 3


class TestScan:
    """Tests for ReservedFileScanner.scan method."""

    def test_finds_only_reserved_names(self, reserved_tree: Path) -> None:
        """nul is found, con.txt and readme.md are not."""
        session = ScanSession()

        found = list(ReservedFileScanner().scan([str(reserved_tree)], session))

        names = sorted(f.name for f in found)
        assert names == ["COM1", "aux", "nul"]
        assert session.files_found == 3
        assert session.files_scanned == 5

    def test_found_file_fields(self, reserved_tree: Path) -> None:
        """FoundFile records name, paths and size."""
        found = list(ReservedFileScanner(max_depth=None).scan([str(reserved_tree)]))
        nul = next(f for f in found if f.name == "nul")

        assert nul.full_path == str(reserved_tree / "nul")
        assert nul.directory == str(reserved_tree)
        assert nul.size_bytes == 5
        assert nul.last_modified.tzinfo is not None
        assert nul.is_read_only is False
        assert nul.attributes == "Normal"

    @pytest.mark.parametrize(
        ("max_depth", "expected"),
        [
            (1, ["COM1", "nul"]),
            (2, ["COM1", "aux", "nul"]),
            (3, ["COM1", "aux", "nul"]),
        ],
    )
    def test_max_depth_limits_recursion(
        self, reserved_tree: Path, max_depth: int, expected: list[str]
    ) -> None:
        """Exactly the files at depth <= max_depth are found."""
        found = list(ReservedFileScanner(max_depth=max_depth).scan([str(reserved_tree)]))

        assert sorted(f.name for f in found) == expected

    def test_max_depth_zero_is_unlimited(self, reserved_tree: Path) -> None:
        """max_depth=0 behaves like no limit."""
        found = list(ReservedFileScanner(max_depth=0).scan([str(reserved_tree)]))

        assert len(found) == 3

    def test_excluded_directory_is_pruned(self, reserved_tree: Path) -> None:
        """Files below an excluded directory are not scanned at all."""
        session = ScanSession()

        found = list(ReservedFileScanner(exclude=["SUB"]).scan([str(reserved_tree)], session))

        assert [f.name for f in found] == ["nul"]
        assert session.files_scanned == 3

    def test_excluded_root_is_skipped(self, reserved_tree: Path) -> None:
        """A root matching an exclusion yields nothing."""
        found = list(ReservedFileScanner(exclude=["tree"]).scan([str(reserved_tree)]))

        assert found == []

    def test_missing_root_is_skipped(
        self, reserved_tree: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Missing roots log a warning and scanning continues."""
        with caplog.at_level(logging.WARNING):
            found = list(
                ReservedFileScanner().scan([str(tmp_path / "missing"), str(reserved_tree)])
            )

        assert len(found) == 3
        assert "Scan path does not exist" in caplog.text

    def test_multiple_roots(self, tmp_path: Path) -> None:
        """Each root is scanned in turn."""
        for name in ("a", "b"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "prn").write_text("")

        found = list(ReservedFileScanner().scan([str(tmp_path / "a"), str(tmp_path / "b")]))

        assert [Path(f.full_path).parent.name for f in found] == ["a", "b"]

    def test_directories_named_reserved_are_not_files(self, tmp_path: Path) -> None:
        """A directory called nul is descended into, not reported."""
        (tmp_path / "nul").mkdir()
        (tmp_path / "nul" / "lpt1").write_text("")

        found = list(ReservedFileScanner().scan([str(tmp_path)]))

        assert [f.name for f in found] == ["lpt1"]

    def test_unreadable_directory_is_skipped(
        self, reserved_tree: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A directory that cannot be listed is reported and skipped."""
        real_scandir = os.scandir
        blocked = str(reserved_tree / "sub")

        def fake_scandir(path: os.PathLike[str] | str):  # type: ignore[no-untyped-def]
            if str(path) == blocked:
                raise PermissionError(13, "Permission denied", blocked)
            return real_scandir(path)

        with (
            patch("nulsweep.sweeper.scanner.os.scandir", side_effect=fake_scandir),
            caplog.at_level(logging.WARNING),
        ):
            found = list(ReservedFileScanner().scan([str(reserved_tree)]))

        assert [f.name for f in found] == ["nul"]
        assert "Cannot read directory" in caplog.text

    def test_file_root_is_checked_directly(self, reserved_tree: Path) -> None:
        """A reserved-name file given as the root is found itself."""
        session = ScanSession()

        found = list(ReservedFileScanner().scan([str(reserved_tree / "nul")], session))

        assert [f.full_path for f in found] == [str(reserved_tree / "nul")]
        assert session.files_scanned == 1
        assert session.files_found == 1

    def test_file_root_with_ordinary_name(self, reserved_tree: Path) -> None:
        """An ordinary file given as the root is scanned but not reported."""
        session = ScanSession()

        found = list(ReservedFileScanner().scan([str(reserved_tree / "con.txt")], session))

        assert found == []
        assert session.files_scanned == 1

    def test_default_session(self, reserved_tree: Path) -> None:
        """scan works without a session."""
        assert len(list(ReservedFileScanner().scan([str(reserved_tree)]))) == 3


class TestBuildFoundFile:
    """Tests for build_found_file function."""

    def test_missing_file_returns_none(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A file that vanished before stat is skipped."""
        with caplog.at_level(logging.WARNING):
            result = build_found_file(str(tmp_path / "nul"))

        assert result is None
        assert "Cannot read file information" in caplog.text

    def test_read_only_file(self, tmp_path: Path) -> None:
        """A file without the owner write bit is read-only on POSIX."""
        target = tmp_path / "con"
        target.write_text("x")
        st = os.stat(target)

        with patch("nulsweep.sweeper.scanner.os.stat") as mock_stat:
            mock_stat.return_value = os.stat_result(
                (stat.S_IFREG | 0o444, *tuple(st)[1:])
            )
            result = build_found_file(str(target))

        assert result is not None
        assert result.is_read_only is True
        assert result.attributes == "ReadOnly"


class TestDescribeAttributes:
    """Tests for _describe_attributes function."""

    def test_windows_attributes(self) -> None:
        """Windows attribute flags are listed by name."""

        class _Stat:
            st_mode = stat.S_IFREG | 0o666
            st_file_attributes = 0x1 | 0x20

        read_only, attributes = _describe_attributes(_Stat())  # type: ignore[arg-type]

        assert read_only is True
        assert attributes == "ReadOnly, Archive"

    def test_windows_no_attributes(self) -> None:
        """A file without flags is Normal."""

        class _Stat:
            st_mode = stat.S_IFREG | 0o666
            st_file_attributes = 0

        assert _describe_attributes(_Stat()) == (False, "Normal")  # type: ignore[arg-type]


class TestDefaultScanRoots:
    """Tests for default_scan_roots function."""

    def test_posix_uses_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Outside Windows the current directory is scanned."""
        monkeypatch.chdir(tmp_path)

        with patch.object(scanner_module, "IS_WINDOWS", False):
            assert default_scan_roots() == [os.getcwd()]
