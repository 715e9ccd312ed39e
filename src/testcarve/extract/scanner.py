"""Read what a test directory itself says about its dependencies.

Three things are scanned, all with plain regexes:

- the test's own files, classified by extension
- fully-qualified class names on the launcher line of a test script
- relative links in a test page (``href``/``src``) to other corpus files
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote, urlsplit

from testcarve.config.models import LayoutConfig
from testcarve.core.logging import get_logger
from testcarve.extract.models import ChildKind

log = get_logger("extract.scanner")

CLASS_NAME_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$-]*[.][.A-Za-z0-9_$-]+")
LINK_PATTERN = re.compile(r"""(?:href|src)\s*=\s*["']([^"'#?]+)[^"']*["']""", re.IGNORECASE)


@dataclass
class ScanResult:
    """Immediate children of a test directory, grouped by kind."""

    children: dict[ChildKind, list[Path]] = field(
        default_factory=lambda: {kind: [] for kind in ChildKind}
    )

    @property
    def all_files(self) -> list[Path]:
        return sorted(p for paths in self.children.values() for p in paths)

    @property
    def sources(self) -> list[Path]:
        return self.children[ChildKind.SOURCE]

    @property
    def scripts(self) -> list[Path]:
        return self.children[ChildKind.SCRIPT]

    @property
    def pages(self) -> list[Path]:
        return self.children[ChildKind.PAGE]

    @property
    def has_natives(self) -> bool:
        return bool(self.children[ChildKind.NATIVE])


def scan_test_dir(test_dir: Path, layout: LayoutConfig) -> ScanResult:
    """Classify the non-directory children of ``test_dir`` (not recursive)."""
    result = ScanResult()
    for child in sorted(test_dir.iterdir()):
        if child.is_dir():
            continue
        kind = ChildKind.classify(child.name, layout)
        result.children[kind].append(child)
    return result


def find_first_line(path: Path, pattern: str) -> str | None:
    """First line of ``path`` containing ``pattern``."""
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            if pattern in line:
                return line.rstrip("\r\n")
    return None


def find_script_classes(script: Path, launcher_pattern: str) -> list[str]:
    """Class-name-shaped tokens on the first launcher line of a script.

    Candidates are a heuristic: option values such as ``-Dfoo.bar`` show up
    too and simply fail to resolve later.
    """
    line = find_first_line(script, launcher_pattern)
    if line is None:
        log.debug("script_without_launcher", script=str(script))
        return []
    return CLASS_NAME_PATTERN.findall(line)


def find_page_links(page: Path, corpus_root: Path) -> list[Path]:
    """Existing corpus files referenced by relative links in a test page."""
    text = page.read_text(encoding="utf-8", errors="replace")
    found: list[Path] = []
    for raw in LINK_PATTERN.findall(text):
        parts = urlsplit(raw)
        if parts.scheme or parts.netloc or parts.path.startswith("/"):
            continue
        target = Path(os.path.normpath(page.parent / unquote(parts.path)))
        if not target.is_relative_to(corpus_root) or not target.is_file():
            continue
        if target not in found:
            found.append(target)
    return found