"""Tests for file handles, the monitored wrapper and the recorder."""

from __future__ import annotations

from pathlib import Path

import pytest

from testcarve.oracle.handles import (
    AccessKind,
    DependencyRecorder,
    FileHandle,
    FileKind,
    MonitoredFileObject,
    unwrap,
)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "root" / "pkg" / "A.java"
    path.parent.mkdir(parents=True)
    path.write_text("package pkg;\nclass A {}\n")
    return path


class TestFileKind:
    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("A.java", FileKind.SOURCE),
            ("A.class", FileKind.CLASS),
            ("index.html", FileKind.HTML),
            ("run.ksh", FileKind.OTHER),
        ],
    )
    def test_kind_from_extension(self, name: str, kind: FileKind) -> None:
        assert FileKind.of(name) is kind


class TestFileHandle:
    def test_in_container_joins_relative(self, tmp_path: Path) -> None:
        handle = FileHandle.in_container(str(tmp_path), "pkg/A.java")

        assert handle.path == str(tmp_path / "pkg" / "A.java")
        assert handle.kind is FileKind.SOURCE

    def test_symlinks_not_resolved(self, tmp_path: Path, source_file: Path) -> None:
        link = tmp_path / "Bridge.java"
        link.symlink_to(source_file)

        handle = FileHandle.for_path(link)

        assert handle.path == str(link)

    def test_reads_content(self, source_file: Path) -> None:
        handle = FileHandle.for_path(source_file)

        assert handle.read_text().startswith("package pkg;")


class TestDependencyRecorder:
    def test_first_access_recorded_once(self, source_file: Path) -> None:
        recorder = DependencyRecorder()
        handle = FileHandle.for_path(source_file)

        assert recorder.record(handle, AccessKind.CHAR_CONTENT) is True
        assert recorder.record(handle, AccessKind.READER) is False
        assert recorder.paths == {str(source_file)}
        assert str(source_file) in recorder
        assert len(recorder) == 1


class TestMonitoredFileObject:
    """Content access is observable; listing and naming are not."""

    def test_get_char_content_records_and_forwards(self, source_file: Path) -> None:
        # Given
        recorder = DependencyRecorder()
        wrapped = MonitoredFileObject(FileHandle.for_path(source_file), recorder)

        # When
        content = wrapped.get_char_content()

        # Then
        assert "class A" in content
        assert recorder.paths == {str(source_file)}

    @pytest.mark.parametrize("opener", ["open_input_stream", "open_reader"])
    def test_stream_access_records(self, source_file: Path, opener: str) -> None:
        recorder = DependencyRecorder()
        wrapped = MonitoredFileObject(FileHandle.for_path(source_file), recorder)

        with getattr(wrapped, opener)() as stream:
            assert stream.read()

        assert str(source_file) in recorder

    def test_failed_open_records_nothing(self, tmp_path: Path) -> None:
        recorder = DependencyRecorder()
        wrapped = MonitoredFileObject(FileHandle.for_path(tmp_path / "Gone.java"), recorder)

        with pytest.raises(FileNotFoundError):
            wrapped.get_char_content()

        assert len(recorder) == 0

    def test_metadata_access_records_nothing(self, source_file: Path) -> None:
        recorder = DependencyRecorder()
        wrapped = MonitoredFileObject(FileHandle.for_path(source_file), recorder)

        _ = wrapped.name, wrapped.kind, wrapped.path

        assert len(recorder) == 0

    def test_without_recorder_forwards_silently(self, source_file: Path) -> None:
        wrapped = MonitoredFileObject(FileHandle.for_path(source_file))

        assert "class A" in wrapped.get_char_content()

    def test_unwrap(self, source_file: Path) -> None:
        handle = FileHandle.for_path(source_file)

        assert unwrap(MonitoredFileObject(handle)) is handle
        assert unwrap(handle) is handle
