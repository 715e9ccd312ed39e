"""Dependency closure of one test.

The closure is discovered, never computed: the test's own files are kept as
they are, and every source unit of the test (plus a stub per class named in a
test script) is handed to the compiler oracle on its own. Whatever the
compiler reads from the source roots is a dependency.

Source roots registered with the oracle:

- ``<corpus>/src``
- every ``<corpus>/src/<prefix>*`` directory that is not a module descriptor dir
- a normalized tree of the test directory and of each ancestor up to ``tests/``
- a normalized tree of ``<corpus>/src/tests``, when present
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from testcarve.config.models import CarveConfig, CompilerConfig
from testcarve.core.errors import ExtractionError
from testcarve.core.logging import get_logger
from testcarve.extract.assembler import assemble, resolve_bridges
from testcarve.extract.models import ExtractionContext, ExtractionRequest, ExtractionResult
from testcarve.extract.scanner import find_page_links, find_script_classes, scan_test_dir
from testcarve.normalize import normalize
from testcarve.oracle import discover

log = get_logger("extract.orchestrator")

Oracle = Callable[..., set[str]]

FIXED_TESTS = "tests"
FIXED_SRC_TESTS = "src-tests"


def base_source_roots(src_dir: Path, *, module_prefix: str, module_suffix: str) -> list[Path]:
    """``src`` itself plus its module-namespace children."""
    roots = [src_dir]
    for child in sorted(src_dir.iterdir()):
        if not child.is_dir():
            continue
        if child.name.startswith(module_prefix) and not child.name.endswith(module_suffix):
            roots.append(child)
    return roots


def stub_source(class_name: str, stub_class: str) -> str:
    """A compilation unit whose only job is to make javac resolve ``class_name``."""
    return f"import {class_name};\nclass {stub_class} {{\n{class_name} field;\n}}\n"


def _ancestors(test_dir: Path, tests_root: Path) -> list[Path]:
    """Directories from the test's parent up to, not including, ``tests_root``."""
    chain: list[Path] = []
    current = test_dir.parent
    while current != tests_root and current.is_relative_to(tests_root):
        chain.append(current)
        current = current.parent
    return chain


def _normalize_fixed_trees(ctx: ExtractionContext, scratch: Path) -> None:
    request = ctx.request
    layout = ctx.config.layout
    opts = {"source_ext": layout.source_ext, "module_descriptor": layout.module_descriptor}

    fixed_tests = scratch / FIXED_TESTS
    normalize(request.test_dir, fixed_tests, True, **opts)
    # Package-mates at each level above the test, but not their subtrees
    for ancestor in _ancestors(request.test_dir, request.tests_dir):
        normalize(ancestor, fixed_tests, False, **opts)
    ctx.add_source_root(fixed_tests)

    src_tests = request.src_dir / "tests"
    if src_tests.is_dir():
        fixed_src_tests = scratch / FIXED_SRC_TESTS
        normalize(src_tests, fixed_src_tests, True, **opts)
        ctx.add_source_root(fixed_src_tests)


def _discover_sources(ctx: ExtractionContext, oracle: Oracle, compiler: CompilerConfig) -> None:
    # One unit per call: javac may resolve several units jointly, which would
    # blur which files each of them needs.
    for unit in ctx.source_units:
        found = oracle([unit], ctx.source_roots, config=compiler)
        log.debug("source_unit_resolved", unit=str(unit), found=len(found))
        ctx.dependencies.update(found)


def _discover_script_classes(
    ctx: ExtractionContext, oracle: Oracle, compiler: CompilerConfig, scratch: Path
) -> None:
    stub_class = ctx.config.layout.stub_class
    stub = scratch / f"{stub_class}{ctx.config.layout.source_ext}"
    for class_name in ctx.script_classes:
        try:
            stub.write_text(stub_source(class_name, stub_class), encoding="utf-8")
        except OSError as e:
            raise ExtractionError.write_failed(str(stub), str(e)) from e
        try:
            found = oracle([stub], ctx.source_roots, config=compiler)
        finally:
            stub.unlink(missing_ok=True)
        # A name that does not resolve just finds nothing
        log.debug("script_class_resolved", class_name=class_name, found=len(found))
        ctx.dependencies.update(found)


def find_dependencies(
    request: ExtractionRequest,
    config: CarveConfig | None = None,
    *,
    oracle: Oracle = discover,
) -> ExtractionContext:
    """Discover the canonical dependency closure of ``request.test_dir``.

    Returns the run context; ``ctx.dependencies`` is finalized and holds true
    file paths only (no bridges). The scratch area is gone when this returns
    or raises.

    Raises:
        ExtractionError: On filesystem errors while building normalized trees.
        OracleError: If the compiler cannot be started.
    """
    config = config or CarveConfig()
    layout = config.layout
    ctx = ExtractionContext(request=request, config=config)

    scan = scan_test_dir(request.test_dir, layout)
    # A test's own files are always kept
    ctx.dependencies.update(scan.all_files)
    ctx.source_units.extend(scan.sources)
    ctx.has_natives = scan.has_natives
    for script in scan.scripts:
        ctx.script_classes.extend(find_script_classes(script, layout.launcher_pattern))
    for page in scan.pages:
        ctx.dependencies.update(find_page_links(page, request.corpus_root))
    if request.page_file is not None:
        log.debug("page_descriptor_missing", page=str(request.page_file))

    for root in base_source_roots(
        request.src_dir,
        module_prefix=layout.module_prefix,
        module_suffix=layout.module_suffix,
    ):
        ctx.add_source_root(root)

    log.info(
        "test_scanned",
        test_dir=str(request.test_dir),
        files=len(scan.all_files),
        source_units=len(ctx.source_units),
        script_classes=len(ctx.script_classes),
        has_natives=ctx.has_natives,
    )

    with tempfile.TemporaryDirectory(prefix="tcarve-") as tmp:
        scratch = Path(tmp)
        _normalize_fixed_trees(ctx, scratch)
        # Every root is registered before the first oracle call
        _discover_sources(ctx, oracle, config.compiler)
        _discover_script_classes(ctx, oracle, config.compiler, scratch)
        # Bridges only exist inside the scratch area: resolve before it goes
        canonical = ctx.dependencies.finalize(resolve_bridges(ctx.dependencies))

    log.info("dependencies_found", test_dir=str(request.test_dir), files=len(canonical))
    return ctx


def extract_test(
    request: ExtractionRequest,
    config: CarveConfig | None = None,
    *,
    dry_run: bool = False,
    oracle: Oracle = discover,
) -> ExtractionResult:
    """Discover the closure of one test and copy it to the output root.

    With ``dry_run`` nothing is written; the result lists the canonical
    corpus paths instead of output paths.
    """
    config = config or CarveConfig()
    ctx = find_dependencies(request, config, oracle=oracle)
    if dry_run:
        files = [Path(p) for p in ctx.dependencies]
        return ExtractionResult(files=files, dry_run=True)
    return assemble(request, ctx.dependencies, has_natives=ctx.has_natives, config=config)
