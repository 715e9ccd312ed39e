"""Extraction data model."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from testcarve.config.models import CarveConfig, LayoutConfig
from testcarve.core.errors import InternalError


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """One validated extraction. Created once per run; never mutated."""

    corpus_root: Path
    output_root: Path
    test_dir: Path
    test_name: str = ""
    page_file: Path | None = None  # descriptor named by the identifier but absent

    @property
    def src_dir(self) -> Path:
        return self.corpus_root / "src"

    @property
    def tests_dir(self) -> Path:
        return self.corpus_root / "tests"


class ChildKind(Enum):
    """Classification of a file directly inside the test directory."""

    SOURCE = "source"
    NATIVE = "native"
    SCRIPT = "script"
    PAGE = "page"
    OTHER = "other"

    @classmethod
    def classify(cls, name: str, layout: LayoutConfig) -> ChildKind:
        if name.endswith(layout.source_ext):
            return cls.SOURCE
        if name.endswith(layout.native_ext):
            return cls.NATIVE
        if any(name.endswith(ext) for ext in layout.script_exts):
            return cls.SCRIPT
        if name.endswith(layout.page_ext):
            return cls.PAGE
        return cls.OTHER


class DependencySet:
    """Absolute path strings of every file the extracted test needs.

    Grows monotonically during discovery; ``finalize`` fixes the canonical
    content once, after which the set is read-only.
    """

    def __init__(self, paths: Iterable[str | os.PathLike[str]] = ()) -> None:
        self._paths: set[str] = set()
        self._final = False
        self.update(paths)

    @property
    def finalized(self) -> bool:
        return self._final

    def _check_open(self) -> None:
        if self._final:
            raise InternalError.unexpected("dependency set already finalized")

    def add(self, path: str | os.PathLike[str]) -> None:
        self._check_open()
        self._paths.add(os.fspath(path))

    def update(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        self._check_open()
        self._paths.update(os.fspath(p) for p in paths)

    def finalize(self, canonical: Iterable[str]) -> frozenset[str]:
        """Replace the content with its canonical form and freeze it."""
        self._check_open()
        self._paths = set(canonical)
        self._final = True
        return frozenset(self._paths)

    def __contains__(self, path: object) -> bool:
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)


@dataclass
class ExtractionContext:
    """Per-run state threaded through discovery. Nothing here outlives the run."""

    request: ExtractionRequest
    config: CarveConfig
    dependencies: DependencySet = field(default_factory=DependencySet)
    source_roots: list[Path] = field(default_factory=list)
    source_units: list[Path] = field(default_factory=list)
    script_classes: list[str] = field(default_factory=list)
    has_natives: bool = False

    def add_source_root(self, root: Path) -> None:
        """Register a root; the list only grows and never holds duplicates."""
        if root not in self.source_roots:
            self.source_roots.append(root)


@dataclass
class ExtractionResult:
    """Outcome of an extraction."""

    files: list[Path]
    copied: int = 0
    native_tree_copied: bool = False
    dry_run: bool = False
