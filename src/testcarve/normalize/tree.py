"""Build package-shaped trees of symlinks over misplaced sources.

Not every source file in the corpus sits in the directory its package
declaration implies, but javac's source path only finds files at
``<root>/<package dirs>/<Name>.java``. ``normalize`` walks a directory and
creates, in a scratch tree, one symlink per package-bearing source at its
canonical location. The walked directory is never modified.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from testcarve.core.errors import ExtractionError
from testcarve.core.logging import get_logger

log = get_logger("normalize")

PACKAGE_PATTERN = re.compile(r"^\s*package\s+([A-Za-z0-9$_.-]+)\s*;")

MODULE_DESCRIPTOR = "module-info.java"
SOURCE_EXT = ".java"


@dataclass(frozen=True, slots=True)
class SymbolicBridge:
    """A link at a canonical package location pointing at the true file."""

    link: Path
    target: Path


def parse_package(path: Path) -> str | None:
    """Dotted package name from the first matching ``package x.y;`` line."""
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            match = PACKAGE_PATTERN.search(line)
            if match:
                return match.group(1)
    return None


def canonical_location(dest_root: Path, package: str, filename: str) -> Path:
    return dest_root.joinpath(*package.split("."), filename)


def _link(link: Path, target: Path) -> None:
    try:
        link.parent.mkdir(parents=True, exist_ok=True)
        link.symlink_to(target)
    except OSError as e:
        raise ExtractionError.link_failed(str(link), str(target), str(e)) from e


def _bridge_file(
    path: Path, dest_root: Path, bridges: list[SymbolicBridge], source_ext: str
) -> None:
    if not path.name.endswith(source_ext):
        return
    package = parse_package(path)
    if package is None:
        return
    link = canonical_location(dest_root, package, path.name)
    # lexists: a dangling link still occupies the location
    if os.path.lexists(link):
        log.debug("bridge_shadowed", location=str(link), skipped=str(path))
        return
    _link(link, path)
    bridges.append(SymbolicBridge(link=link, target=path))
    log.debug("bridge_created", location=str(link), target=str(path))


def _walk(
    directory: Path,
    dest_root: Path,
    *,
    recursive: bool,
    bridges: list[SymbolicBridge],
    source_ext: str,
    module_descriptor: str,
) -> None:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if recursive:
                _walk(
                    Path(entry.path),
                    dest_root,
                    recursive=recursive,
                    bridges=bridges,
                    source_ext=source_ext,
                    module_descriptor=module_descriptor,
                )
            continue
        if entry.name == module_descriptor:
            # Rest of this directory belongs to a module; skip its siblings
            log.debug("module_descriptor_skip", directory=str(directory))
            break
        _bridge_file(Path(entry.path), dest_root, bridges, source_ext)


def normalize(
    source_dir: Path,
    dest_root: Path,
    recursive: bool,
    *,
    source_ext: str = SOURCE_EXT,
    module_descriptor: str = MODULE_DESCRIPTOR,
) -> list[SymbolicBridge]:
    """Link every package-bearing source under ``source_dir`` into ``dest_root``.

    Args:
        source_dir: Directory to walk. Never modified.
        dest_root: Root of the canonical tree; created if missing.
        recursive: When False only files directly in ``source_dir`` are linked.
        source_ext: Extension of source files.
        module_descriptor: File name that makes the rest of its directory skipped.

    Returns:
        Bridges created by this call. Locations that already existed are left
        untouched, so the first file linked at a location wins.

    Raises:
        ExtractionError: If a link cannot be created.
    """
    dest_root.mkdir(parents=True, exist_ok=True)
    bridges: list[SymbolicBridge] = []
    _walk(
        source_dir,
        dest_root,
        recursive=recursive,
        bridges=bridges,
        source_ext=source_ext,
        module_descriptor=module_descriptor,
    )
    log.debug(
        "tree_normalized",
        source_dir=str(source_dir),
        dest_root=str(dest_root),
        recursive=recursive,
        bridges=len(bridges),
    )
    return bridges
