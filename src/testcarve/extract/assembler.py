"""Resolve symbolic bridges and copy a closure into the output directory.

Files land at their corpus-relative paths. Any failure aborts the whole run;
there is no partial-success mode.
"""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Iterable, Mapping
from pathlib import Path

from testcarve.config.models import CarveConfig
from testcarve.core.errors import ExtractionError
from testcarve.core.logging import get_logger
from testcarve.extract.models import ExtractionRequest, ExtractionResult
from testcarve.templates import get_makefile_template, render_run_script

log = get_logger("extract.assembler")

MAKEFILE_NAME = "Makefile"
RUN_SCRIPT_NAME = "run_test.sh"


def resolve_bridges(paths: Iterable[str]) -> set[str]:
    """Replace every symlink by its target; the result is deduplicated."""
    resolved: set[str] = set()
    for path in paths:
        if os.path.islink(path):
            target = os.readlink(path)
            if not os.path.isabs(target):
                target = os.path.join(os.path.dirname(path), target)
            path = os.path.normpath(target)
        resolved.add(path)
    return resolved


def copy_dependencies(request: ExtractionRequest, paths: Iterable[str | Path]) -> list[Path]:
    """Mirror every path under the output root, keeping timestamps and modes."""
    copied: list[Path] = []
    for path in sorted(Path(p) for p in paths):
        if not path.is_relative_to(request.corpus_root):
            raise ExtractionError.outside_corpus(str(path), str(request.corpus_root))
        dest = request.output_root / path.relative_to(request.corpus_root)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, dest)
        except OSError as e:
            raise ExtractionError.copy_failed(str(path), str(dest), str(e)) from e
        log.debug("dependency_copied", src=str(path), dest=str(dest))
        copied.append(dest)
    return copied


def copy_native_tree(request: ExtractionRequest, native_dir: str) -> Path:
    """Copy ``src/<native_dir>`` wholesale into ``<output>/src/<native_dir>``."""
    source = request.src_dir / native_dir
    dest = request.output_root / "src" / native_dir
    try:
        shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise ExtractionError.copy_failed(str(source), str(dest), str(e)) from e
    log.info("native_tree_copied", src=str(source), dest=str(dest))
    return dest


def write_build_files(
    request: ExtractionRequest, *, env: Mapping[str, str] | None = None
) -> tuple[Path, Path]:
    """Write the Makefile (verbatim) and the rendered run script."""
    makefile = request.output_root / MAKEFILE_NAME
    run_script = request.output_root / RUN_SCRIPT_NAME
    try:
        makefile.write_bytes(get_makefile_template())
        run_script.write_text(render_run_script(request.test_name, env=env), encoding="utf-8")
        mode = run_script.stat().st_mode
        run_script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise ExtractionError.write_failed(str(request.output_root), str(e)) from e
    return makefile, run_script


def assemble(
    request: ExtractionRequest,
    dependencies: Iterable[str | Path],
    *,
    has_natives: bool,
    config: CarveConfig | None = None,
    env: Mapping[str, str] | None = None,
) -> ExtractionResult:
    """Copy the closure, the native tree when needed, and the build files.

    Raises:
        ExtractionError: On the first file that cannot be copied or written.
    """
    config = config or CarveConfig()
    files = copy_dependencies(request, dependencies)

    native_copied = False
    if has_natives:
        copy_native_tree(request, config.layout.native_dir)
        native_copied = True

    write_build_files(request, env=env)
    log.info(
        "test_assembled",
        output_root=str(request.output_root),
        files=len(files),
        native_tree=native_copied,
    )
    return ExtractionResult(files=files, copied=len(files), native_tree_copied=native_copied)
