"""File handles as the compiler names them, and the wrapper that watches them.

A ``FileHandle`` is the plain file object: where the compiler found a file and
under which container (source root or archive). ``MonitoredFileObject``
forwards to a handle and reports to a ``DependencyRecorder`` the first time
its content is opened. Listing a wrapper records nothing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import IO


class FileKind(Enum):
    """Kind of a compiler file object, derived from its extension."""

    SOURCE = ".java"
    CLASS = ".class"
    HTML = ".html"
    OTHER = ""

    @classmethod
    def of(cls, name: str) -> FileKind:
        for kind in (cls.SOURCE, cls.CLASS, cls.HTML):
            if name.endswith(kind.value):
                return kind
        return cls.OTHER


class AccessKind(Enum):
    """How file content was opened."""

    CHAR_CONTENT = "char_content"
    INPUT_STREAM = "input_stream"
    READER = "reader"


@dataclass(frozen=True, slots=True)
class FileHandle:
    """A file as reported by the compiler.

    ``path`` is absolute and never has symlinks resolved: a handle inside a
    normalized tree keeps pointing at the bridge, not at its target.
    """

    path: str
    container: str | None = None
    relative: str | None = None
    archive: bool = False

    @classmethod
    def for_path(cls, path: str | os.PathLike[str]) -> FileHandle:
        return cls(path=os.path.normpath(os.path.abspath(os.fspath(path))))

    @classmethod
    def in_container(cls, container: str, relative: str, *, archive: bool = False) -> FileHandle:
        container = os.path.normpath(os.path.abspath(container))
        relative = relative.replace("\\", "/").lstrip("/")
        if archive:
            path = f"{container}({relative})"
        else:
            path = os.path.normpath(os.path.join(container, *relative.split("/")))
        return cls(path=path, container=container, relative=relative, archive=archive)

    @property
    def name(self) -> str:
        return self.path

    @property
    def kind(self) -> FileKind:
        return FileKind.of(self.relative or self.path)

    def read_text(self, *, ignore_encoding_errors: bool = False) -> str:
        errors = "replace" if ignore_encoding_errors else "strict"
        with open(self.path, encoding="utf-8", errors=errors) as f:
            return f.read()


class DependencyRecorder:
    """Collects each monitored file once, on its first content access."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def record(self, handle: FileHandle, access: AccessKind) -> bool:  # noqa: ARG002
        """Record a content access. Returns True when the file was not seen before."""
        if handle.path in self._seen:
            return False
        self._seen.add(handle.path)
        return True

    @property
    def paths(self) -> set[str]:
        return set(self._seen)

    def __contains__(self, path: object) -> bool:
        return path in self._seen

    def __len__(self) -> int:
        return len(self._seen)


class MonitoredFileObject:
    """Forwarding file object that reports content access of its delegate.

    A wrapper without a recorder forwards silently.
    """

    __slots__ = ("file", "recorder")

    def __init__(self, file: FileHandle, recorder: DependencyRecorder | None = None) -> None:
        self.file = file
        self.recorder = recorder

    @property
    def path(self) -> str:
        return self.file.path

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def kind(self) -> FileKind:
        return self.file.kind

    def mark_opened(self, access: AccessKind) -> None:
        if self.recorder is not None:
            self.recorder.record(self.file, access)

    def get_char_content(self, ignore_encoding_errors: bool = False) -> str:
        content = self.file.read_text(ignore_encoding_errors=ignore_encoding_errors)
        self.mark_opened(AccessKind.CHAR_CONTENT)
        return content

    def open_input_stream(self) -> IO[bytes]:
        stream = open(self.file.path, "rb")
        self.mark_opened(AccessKind.INPUT_STREAM)
        return stream

    def open_reader(self, ignore_encoding_errors: bool = False) -> IO[str]:
        errors = "replace" if ignore_encoding_errors else "strict"
        reader = open(self.file.path, encoding="utf-8", errors=errors)
        self.mark_opened(AccessKind.READER)
        return reader

    def __repr__(self) -> str:
        return f"MonitoredFileObject({self.file.path!r})"


AnyFile = FileHandle | MonitoredFileObject


def unwrap(file: AnyFile) -> FileHandle:
    """Strip a monitoring wrapper; plain handles pass through."""
    if isinstance(file, MonitoredFileObject):
        return file.file
    return file
