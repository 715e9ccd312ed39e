"""The compiler oracle: which source-path files does javac read for these units?

javac runs as a subprocess with ``-verbose``. The compilation itself does not
need to succeed; its exit status and diagnostics are discarded. What matters is
the trace of files it opened, which is replayed through a
``MonitoringFileManager`` so that only source-path files whose content was
actually read end up in the result.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from collections.abc import Iterable, Sequence

from testcarve.config.models import CompilerConfig
from testcarve.core.errors import OracleError
from testcarve.core.logging import get_logger
from testcarve.oracle.file_manager import Location, MonitoringFileManager, StandardFileManager
from testcarve.oracle.handles import DependencyRecorder
from testcarve.oracle.trace import EventKind, TraceEvent, parse_trace

log = get_logger("oracle.compiler")

# Hidden javac options (JDK 9+ and JDK 8 spelling) that keep attribution
# running after the first error.
_KEEP_GOING_ARGS = ("-XDshould-stop.ifError=FLOW", "-XDshouldStopPolicyIfError=FLOW")


def resolve_executable(config: CompilerConfig) -> str:
    """Absolute path of the configured javac, or OracleError."""
    executable = shutil.which(config.executable)
    if executable is None:
        raise OracleError.compiler_not_found(config.executable)
    return executable


def build_command(
    executable: str,
    entry_units: Sequence[str],
    source_roots: Sequence[str],
    class_output: str,
    config: CompilerConfig,
) -> list[str]:
    cmd = [
        executable,
        "-verbose",
        "-d",
        class_output,
        "-sourcepath",
        os.pathsep.join(source_roots),
        "-implicit:none",
        "-proc:none",
        "-nowarn",
        "-Xlint:none",
    ]
    if config.encoding:
        cmd.extend(["-encoding", config.encoding])
    if config.keep_going:
        cmd.extend(_KEEP_GOING_ARGS)
    cmd.extend(config.extra_args)
    cmd.extend(entry_units)
    return cmd


def _run_compiler(cmd: list[str], *, cwd: str, timeout: float | None) -> str:
    """Run javac and return its combined output. Failures of the build are not errors."""
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise OracleError.compiler_not_found(cmd[0]) from e
    except subprocess.TimeoutExpired:
        log.warning("oracle_timeout", timeout_sec=timeout, entry_units=cmd[-1])
        return ""

    log.debug("oracle_exit", returncode=proc.returncode)
    return (proc.stdout or "") + "\n" + (proc.stderr or "")


def replay(
    events: Iterable[TraceEvent],
    manager: MonitoringFileManager,
    entry_units: Iterable[str],
) -> int:
    """Replay content-access events through the monitoring layer.

    Each parsed file is looked up again on the source path and its content is
    read through the monitored wrapper, which is what records it. Entry units,
    files outside the source path and files the lookup does not produce are
    never recorded. Returns the number of accesses replayed.
    """
    entries = {os.path.normpath(os.path.abspath(e)) for e in entry_units}
    replayed = 0
    for event in events:
        if event.kind is not EventKind.PARSING or event.handle is None:
            continue
        handle = event.handle
        if handle.path in entries:
            continue
        if manager.location_of(handle) is not Location.SOURCE_PATH:
            continue
        candidate = manager.find_source_candidate(handle)
        if candidate is None:
            continue
        try:
            candidate.get_char_content(ignore_encoding_errors=True)
        except OSError as e:
            log.debug("source_unreadable", path=candidate.path, error=str(e))
            continue
        replayed += 1
    return replayed


def discover(
    entry_units: Iterable[str | os.PathLike[str]],
    source_roots: Iterable[str | os.PathLike[str]],
    *,
    config: CompilerConfig | None = None,
) -> set[str]:
    """Return the source-path files javac reads while resolving ``entry_units``.

    Paths are absolute and unresolved: files found through a normalized tree
    are reported at their bridge location.

    Raises:
        OracleError: If javac cannot be found.
    """
    config = config or CompilerConfig()
    executable = resolve_executable(config)
    entries = [os.path.normpath(os.path.abspath(os.fspath(e))) for e in entry_units]
    roots = [os.path.normpath(os.path.abspath(os.fspath(r))) for r in source_roots]

    recorder = DependencyRecorder()
    with tempfile.TemporaryDirectory(prefix="tcarve-cls-") as class_output:
        file_manager = StandardFileManager()
        file_manager.set_location(Location.SOURCE_PATH, roots)
        file_manager.set_location(Location.CLASS_OUTPUT, [class_output])

        cmd = build_command(executable, entries, roots, class_output, config)
        log.debug("oracle_invoked", entry_units=entries, source_roots=len(roots))
        output = _run_compiler(cmd, cwd=class_output, timeout=config.timeout_sec)

        with MonitoringFileManager(file_manager, recorder) as manager:
            replayed = replay(parse_trace(output), manager, entries)

    log.debug("oracle_done", entry_units=entries, replayed=replayed, used=len(recorder))
    return recorder.paths
