"""Tests for the tcarve command line."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from testcarve.cli.main import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_global_config(tmp_path: Path) -> Iterator[None]:
    with patch("testcarve.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "absent.yaml"):
        yield


@pytest.fixture
def fake_javac(corpus: Path) -> Iterator[MagicMock]:
    """javac stand-in that reports reading DirectA from the src root."""
    trace = "[parsing started DirectoryFileObject[{}:direct/pkg/DirectA.java]]\n".format(
        corpus / "src"
    )
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr=trace)
    with (
        patch("testcarve.oracle.compiler.shutil.which", return_value="/usr/bin/javac"),
        patch("testcarve.oracle.compiler.subprocess.run", return_value=completed) as run,
    ):
        yield run


def _args(corpus: Path, output: Path, test: str, *extra: str) -> list[str]:
    return [
        "extract",
        "--corpus",
        str(corpus),
        "--output",
        str(output),
        "--test",
        test,
        *extra,
    ]


class TestCliGroup:
    def test_help_lists_extract(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "extract" in result.output

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_config_file_is_usage_error(
        self, tmp_path: Path, corpus: Path, output_dir: Path
    ) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("compiler: [unclosed\n")

        result = runner.invoke(
            cli, ["--config", str(bad), *_args(corpus, output_dir, "api/api_pkg/test1")]
        )

        assert result.exit_code == 2
        assert "Failed to parse config" in result.output


class TestExtractValidation:
    """Invocation errors are usage errors and write nothing."""

    def test_missing_corpus(self, output_dir: Path) -> None:
        result = runner.invoke(cli, ["extract", "--output", str(output_dir), "--test", "a/b"])

        assert result.exit_code == 2
        assert "Missing required argument: --corpus" in result.output

    def test_wrong_corpus(self, tmp_path: Path, output_dir: Path) -> None:
        result = runner.invoke(cli, _args(tmp_path, output_dir, "a/b"))

        assert result.exit_code == 2
        assert "Wrong corpus dir" in result.output

    def test_wrong_test_name(self, corpus: Path, output_dir: Path) -> None:
        result = runner.invoke(cli, _args(corpus, output_dir, "api/api_pkg/nope"))

        assert result.exit_code == 2
        assert "Wrong test name: api/api_pkg/nope" in result.output
        assert list(output_dir.iterdir()) == []


class TestExtractCommand:
    def test_extracts_into_output(
        self, corpus: Path, output_dir: Path, fake_javac: MagicMock
    ) -> None:
        # When
        result = runner.invoke(cli, _args(corpus, output_dir, "api/api_pkg/testDirecLib"))

        # Then
        assert result.exit_code == 0, result.output
        assert (output_dir / "src" / "direct" / "pkg" / "DirectA.java").is_file()
        assert (output_dir / "tests" / "api" / "api_pkg" / "testDirecLib").is_dir()
        assert (output_dir / "Makefile").is_file()
        assert (output_dir / "run_test.sh").is_file()
        assert fake_javac.call_count == 1

    def test_dry_run_lists_closure(
        self, corpus: Path, output_dir: Path, fake_javac: MagicMock
    ) -> None:
        result = runner.invoke(
            cli, _args(corpus, output_dir, "api/api_pkg/testDirecLib", "--dry-run")
        )

        assert result.exit_code == 0, result.output
        assert str(corpus / "src" / "direct" / "pkg" / "DirectA.java") in result.output
        assert list(output_dir.iterdir()) == []

    def test_missing_compiler_fails(self, corpus: Path, output_dir: Path) -> None:
        with patch("testcarve.oracle.compiler.shutil.which", return_value=None):
            result = runner.invoke(cli, _args(corpus, output_dir, "api/api_pkg/test1"))

        assert result.exit_code == 1
        assert "ORACLE_COMPILER_NOT_FOUND" in result.output

    def test_verbose_flag_accepted(
        self, corpus: Path, output_dir: Path, fake_javac: MagicMock
    ) -> None:
        result = runner.invoke(cli, ["-v", *_args(corpus, output_dir, "api/api_pkg/test1")])

        assert result.exit_code == 0, result.output
