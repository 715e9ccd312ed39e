"""Tests for bridge resolution and output assembly."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from testcarve.config.models import CarveConfig, LayoutConfig
from testcarve.core.errors import ErrorCode, ExtractionError
from testcarve.extract.assembler import (
    assemble,
    copy_dependencies,
    copy_native_tree,
    resolve_bridges,
)
from testcarve.extract.models import ExtractionRequest
from testcarve.templates import get_makefile_template


@pytest.fixture
def request_(corpus: Path, output_dir: Path) -> ExtractionRequest:
    return ExtractionRequest(
        corpus_root=corpus,
        output_root=output_dir,
        test_dir=corpus / "tests" / "api" / "api_pkg" / "testDirecLib",
        test_name="api/api_pkg/testDirecLib",
    )


class TestResolveBridges:
    def test_links_replaced_by_targets_and_deduplicated(self, tmp_path: Path) -> None:
        # Given
        real = tmp_path / "real" / "A.java"
        real.parent.mkdir()
        real.write_text("class A {}\n")
        absolute_link = tmp_path / "abs.java"
        absolute_link.symlink_to(real)
        relative_link = tmp_path / "rel.java"
        relative_link.symlink_to(Path("real") / "A.java")

        # When
        resolved = resolve_bridges([str(absolute_link), str(relative_link), str(real)])

        # Then
        assert resolved == {str(real)}

    def test_plain_paths_pass_through(self, tmp_path: Path) -> None:
        assert resolve_bridges([str(tmp_path / "x")]) == {str(tmp_path / "x")}


class TestCopyDependencies:
    def test_mirrors_corpus_relative_paths(
        self, corpus: Path, output_dir: Path, request_: ExtractionRequest
    ) -> None:
        source = corpus / "src" / "direct" / "pkg" / "DirectA.java"
        os.utime(source, (1_000_000_000, 1_000_000_000))

        copied = copy_dependencies(request_, [str(source)])

        dest = output_dir / "src" / "direct" / "pkg" / "DirectA.java"
        assert copied == [dest]
        assert dest.read_text() == source.read_text()
        assert dest.stat().st_mtime == source.stat().st_mtime

    def test_outside_corpus_aborts(self, tmp_path: Path, request_: ExtractionRequest) -> None:
        stray = tmp_path / "stray.java"
        stray.write_text("x\n")

        with pytest.raises(ExtractionError) as exc_info:
            copy_dependencies(request_, [stray])

        assert exc_info.value.code == ErrorCode.EXTRACT_OUTSIDE_CORPUS

    def test_missing_file_aborts(self, corpus: Path, request_: ExtractionRequest) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            copy_dependencies(request_, [corpus / "src" / "Gone.java"])

        assert exc_info.value.code == ErrorCode.EXTRACT_COPY_FAILED


class TestAssemble:
    def test_build_files_written(
        self, corpus: Path, output_dir: Path, request_: ExtractionRequest
    ) -> None:
        # Given
        deps = [str(corpus / "src" / "direct" / "pkg" / "DirectA.java")]

        # When
        result = assemble(request_, deps, has_natives=False, env={"JOB_NAME": "nightly"})

        # Then
        assert result.copied == 1
        assert not result.native_tree_copied
        assert (output_dir / "Makefile").read_bytes() == get_makefile_template()
        script = output_dir / "run_test.sh"
        assert script.stat().st_mode & stat.S_IXUSR
        text = script.read_text()
        assert "api/api_pkg/testDirecLib" in text
        assert "nightly" in text
        assert "missing-BUILD_ID" in text
        assert not (output_dir / "src" / "share").exists()

    def test_native_tree_copied_when_natives_seen(
        self, corpus: Path, output_dir: Path, request_: ExtractionRequest
    ) -> None:
        share = corpus / "src" / "share" / "lib"
        share.mkdir(parents=True)
        (share / "jckjni.h").write_text("/* header */\n")

        result = assemble(request_, [], has_natives=True, config=CarveConfig(), env={})

        assert result.native_tree_copied
        assert (output_dir / "src" / "share" / "lib" / "jckjni.h").read_text() == "/* header */\n"

    def test_native_dir_configurable(
        self, corpus: Path, output_dir: Path, request_: ExtractionRequest
    ) -> None:
        (corpus / "src" / "natives").mkdir()
        (corpus / "src" / "natives" / "n.c").write_text("int x;\n")
        config = CarveConfig(layout=LayoutConfig(native_dir="natives"))

        copy_native_tree(request_, config.layout.native_dir)

        assert (output_dir / "src" / "natives" / "n.c").is_file()

    def test_missing_native_tree_aborts(self, request_: ExtractionRequest) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            assemble(request_, [], has_natives=True, env={})

        assert exc_info.value.code == ErrorCode.EXTRACT_COPY_FAILED
