"""Validation of invocation arguments into an ExtractionRequest.

Everything here only reads the filesystem. A bad argument raises ConfigError
before any output is written.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from testcarve.core.errors import ConfigError
from testcarve.extract.models import ExtractionRequest

PAGE_EXT = ".html"


@dataclass(frozen=True, slots=True)
class TargetName:
    """Normalized form of a test identifier."""

    relative_dir: str
    page: str | None = None  # descriptor path relative to tests/, when one was named


def _absolute(path: Path) -> Path:
    # no symlink resolution: bridges and javac both report unresolved paths
    return Path(os.path.normpath(path.absolute()))


def normalize_test_name(name: str, *, page_ext: str = PAGE_EXT) -> TargetName:
    """Reduce a test identifier to a directory path relative to ``tests/``.

    - ``a/b/Test.html#frag`` drops the fragment
    - a leading ``/`` and then a leading ``tests/`` are removed
    - a page descriptor is replaced by its containing directory
    """
    url = name
    hash_index = url.rfind("#")
    if hash_index > 0:
        url = url[:hash_index]
    if url.startswith("/"):
        url = url[1:]
    if url.startswith("tests/"):
        url = url[len("tests/") :]

    page: str | None = None
    if url.endswith(page_ext):
        page = url
        slash_index = url.rfind("/")
        if slash_index > 0:
            url = url[:slash_index]
    return TargetName(relative_dir=url, page=page)


def build_request(
    corpus: str | Path | None,
    output: str | Path | None,
    test: str | None,
    *,
    page_ext: str = PAGE_EXT,
) -> ExtractionRequest:
    """Validate arguments and build the request.

    Raises:
        ConfigError: On a missing argument, a corpus without ``src``/``tests``,
            a missing output directory or a test that is not a directory.
    """
    if corpus is None:
        raise ConfigError.missing_required("--corpus")
    if output is None:
        raise ConfigError.missing_required("--output")
    if not test:
        raise ConfigError.missing_required("--test")

    corpus_root = Path(corpus)
    if not (
        corpus_root.is_dir()
        and (corpus_root / "src").is_dir()
        and (corpus_root / "tests").is_dir()
    ):
        raise ConfigError.invalid_corpus(str(corpus))

    output_root = Path(output)
    if not output_root.is_dir():
        raise ConfigError.invalid_output(str(output))

    test_name = normalize_test_name(test, page_ext=page_ext)
    corpus_root = _absolute(corpus_root)
    output_root = _absolute(output_root)
    tests_dir = corpus_root / "tests"

    page_file: Path | None = None
    if test_name.page is not None:
        candidate = tests_dir.joinpath(*test_name.page.split("/"))
        if not candidate.exists():
            page_file = candidate

    test_dir = _absolute(tests_dir.joinpath(*[p for p in test_name.relative_dir.split("/") if p]))
    if test_dir == tests_dir or not test_dir.is_relative_to(tests_dir) or not test_dir.is_dir():
        raise ConfigError.unknown_test(test)

    return ExtractionRequest(
        corpus_root=corpus_root,
        output_root=output_root,
        test_dir=test_dir,
        test_name=test,
        page_file=page_file,
    )
