"""Parser for javac ``-verbose`` output.

javac reports every file it reads while resolving symbols, e.g.::

    [parsing started SimpleFileObject[/corpus/tests/a/Test1.java]]
    [parsing started DirectoryFileObject[/tmp/tcarve-x/tests:pkg/Parent.java]]
    [parsing started RegularFileObject[/corpus/src/direct/pkg/DirectA.java]]
    [search path for source files: /corpus/src,/tmp/tcarve-x/tests]
    [loading /modules/java.base/java/lang/Object.class]
    [loading ZipFileIndexFileObject[/jre/lib/rt.jar(java/lang/Object.class)]]
    [wrote /tmp/tcarve-cls-y/pkg/Test1.class]

Lines that are not verbose records (diagnostics, notes) are ignored.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import Enum

from testcarve.oracle.handles import FileHandle


class EventKind(Enum):
    PARSING = "parsing"
    LOADING = "loading"
    WROTE = "wrote"
    SEARCH_PATH = "search_path"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class TraceEvent:
    """One verbose record from the compiler."""

    kind: EventKind
    raw: str
    handle: FileHandle | None = None
    paths: tuple[str, ...] = field(default_factory=tuple)


_RECORD = re.compile(r"^\[(?P<body>.*)\]$")
_WRAPPED = re.compile(r"^(?P<type>[A-Za-z]+FileObject)\[(?P<body>.*)\]$")
_ARCHIVE_MEMBER = re.compile(r"^(?P<archive>.+)\((?P<member>[^()]+)\)$")

_PREFIXES: tuple[tuple[str, EventKind], ...] = (
    ("parsing started ", EventKind.PARSING),
    ("loading ", EventKind.LOADING),
    ("wrote ", EventKind.WROTE),
    ("search path for source files: ", EventKind.SEARCH_PATH),
    ("search path for class files: ", EventKind.SEARCH_PATH),
)

# Types whose body is "<container>:<relative path>"
_CONTAINER_TYPES = frozenset({"DirectoryFileObject"})
_ARCHIVE_TYPES = frozenset({"JarFileObject", "ZipFileObject"})


def parse_handle(descriptor: str) -> FileHandle:
    """Turn a file object description into a plain handle.

    Handles DirectoryFileObject, SimpleFileObject, RegularFileObject,
    PathFileObject, archive member objects and bare paths.
    """
    descriptor = descriptor.strip()
    match = _WRAPPED.match(descriptor)
    if match is None:
        return _bare(descriptor)

    type_name = match.group("type")
    body = match.group("body")

    if type_name in _CONTAINER_TYPES and ":" in body:
        container, relative = body.rsplit(":", 1)
        return FileHandle.in_container(container, relative)

    if type_name in _ARCHIVE_TYPES and ":" in body:
        archive, member = body.rsplit(":", 1)
        return FileHandle.in_container(archive, member, archive=True)

    return _bare(body)


def _bare(body: str) -> FileHandle:
    member = _ARCHIVE_MEMBER.match(body)
    if member is not None and not os.path.isdir(member.group("archive")):
        return FileHandle.in_container(
            member.group("archive"), member.group("member"), archive=True
        )
    if body.startswith("/modules/"):
        # jrt image entry; never a source-path file
        relative = body[len("/modules/") :]
        return FileHandle(path=body, container="/modules", relative=relative, archive=True)
    return FileHandle.for_path(body)


def parse_trace_line(line: str) -> TraceEvent | None:
    """Parse one output line; None for anything that is not a verbose record."""
    line = line.strip()
    record = _RECORD.match(line)
    if record is None:
        return None
    body = record.group("body")

    for prefix, kind in _PREFIXES:
        if not body.startswith(prefix):
            continue
        rest = body[len(prefix) :]
        if kind is EventKind.SEARCH_PATH:
            paths = tuple(p.strip() for p in rest.split(",") if p.strip())
            return TraceEvent(kind=kind, raw=line, paths=paths)
        return TraceEvent(kind=kind, raw=line, handle=parse_handle(rest))

    return TraceEvent(kind=EventKind.OTHER, raw=line)


def parse_trace(text: str) -> list[TraceEvent]:
    events: list[TraceEvent] = []
    for line in text.splitlines():
        event = parse_trace_line(line)
        if event is not None:
            events.append(event)
    return events
