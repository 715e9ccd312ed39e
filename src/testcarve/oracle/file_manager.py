"""File managers: location registry plus the monitoring layer over it.

``StandardFileManager`` knows which directories belong to which location and
answers identity, binary-name and listing questions for plain handles only.
``MonitoringFileManager`` forwards to it and adds the seams the oracle needs:

- identity and binary-name inference always see unwrapped handles
- source-path listings come back wrapped so content access is observable
- other locations (class path, platform, output) are never wrapped
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from types import TracebackType

from testcarve.core.logging import get_logger
from testcarve.oracle.handles import (
    AnyFile,
    DependencyRecorder,
    FileHandle,
    FileKind,
    MonitoredFileObject,
    unwrap,
)

log = get_logger("oracle.file_manager")


class Location(Enum):
    """Where the compiler looks for a file."""

    SOURCE_PATH = "source_path"
    CLASS_PATH = "class_path"
    PLATFORM_CLASS_PATH = "platform_class_path"
    CLASS_OUTPUT = "class_output"


def _norm(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


def _is_under(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class StandardFileManager:
    """Location registry over the local filesystem."""

    def __init__(self) -> None:
        self._locations: dict[Location, list[str]] = {}

    def set_location(self, location: Location, paths: Iterable[str | os.PathLike[str]]) -> None:
        self._locations[location] = [_norm(os.fspath(p)) for p in paths]

    def get_location(self, location: Location) -> list[str]:
        return list(self._locations.get(location, []))

    def has_location(self, location: Location) -> bool:
        return bool(self._locations.get(location))

    def _root_aliases(self, root: str) -> tuple[str, ...]:
        real = os.path.realpath(root)
        return (root,) if real == root else (root, real)

    def _root_for(self, location: Location, file: FileHandle) -> str | None:
        if file.container is not None and not file.archive:
            container = _norm(file.container)
            for root in self._locations.get(location, []):
                if container in self._root_aliases(root):
                    return root
        if file.archive:
            return None
        # Roots may nest (src and src/jck.x); the innermost one names the package.
        matches = [
            root
            for root in self._locations.get(location, [])
            if any(_is_under(file.path, alias) for alias in self._root_aliases(root))
        ]
        return max(matches, key=len, default=None)

    def _relative(self, root: str, file: FileHandle) -> str:
        if file.relative is not None and not file.archive:
            return file.relative
        for alias in self._root_aliases(root):
            if _is_under(file.path, alias):
                return Path(os.path.relpath(file.path, alias)).as_posix()
        raise ValueError(f"{file.path} is not under {root}")

    def is_same_file(self, a: FileHandle, b: FileHandle) -> bool:
        if not isinstance(a, FileHandle) or not isinstance(b, FileHandle):
            raise TypeError(f"Not a plain file handle: {a!r}, {b!r}")
        if _norm(a.path) == _norm(b.path):
            return True
        if a.archive or b.archive or a.relative is None or b.relative is None:
            return False
        if a.relative != b.relative or a.container is None or b.container is None:
            return False
        return os.path.realpath(a.container) == os.path.realpath(b.container)

    def infer_binary_name(self, location: Location, file: FileHandle) -> str | None:
        """Dotted class name of a file relative to the location root that holds it."""
        if not isinstance(file, FileHandle):
            raise TypeError(f"Not a plain file handle: {file!r}")
        root = self._root_for(location, file)
        if root is None:
            return None
        relative = self._relative(root, file)
        stem, _ext = os.path.splitext(relative)
        return stem.replace("/", ".")

    def location_of(self, file: FileHandle) -> Location | None:
        for location in Location:
            if self._root_for(location, file) is not None:
                return location
        return None

    def list(
        self,
        location: Location,
        package_name: str,
        kinds: set[FileKind],
        recurse: bool = False,
    ) -> list[FileHandle]:
        """List files of the given kinds in a package, across every root of a location."""
        package_dir = package_name.replace(".", "/") if package_name else ""
        found: list[FileHandle] = []
        for root in self._locations.get(location, []):
            base = os.path.join(root, *package_dir.split("/")) if package_dir else root
            if not os.path.isdir(base):
                continue
            for dirpath, dirnames, filenames in os.walk(base, followlinks=True):
                dirnames.sort()
                rel_dir = Path(os.path.relpath(dirpath, root)).as_posix()
                for filename in sorted(filenames):
                    if FileKind.of(filename) not in kinds:
                        continue
                    relative = filename if rel_dir == "." else f"{rel_dir}/{filename}"
                    found.append(FileHandle.in_container(root, relative))
                if not recurse:
                    break
        return found

    def get_java_file_for_input(
        self, location: Location, class_name: str, kind: FileKind
    ) -> FileHandle | None:
        relative = class_name.replace(".", "/") + kind.value
        for root in self._locations.get(location, []):
            candidate = FileHandle.in_container(root, relative)
            if os.path.isfile(candidate.path):
                return candidate
        return None

    def close(self) -> None:
        self._locations.clear()


class MonitoringFileManager:
    """Forwarding file manager that makes source-path content access observable."""

    def __init__(
        self, delegate: StandardFileManager, recorder: DependencyRecorder | None = None
    ) -> None:
        self._delegate = delegate
        self._recorder = recorder
        self._listings: dict[str, list[AnyFile]] = {}

    @property
    def recorder(self) -> DependencyRecorder | None:
        return self._recorder

    def is_same_file(self, a: AnyFile, b: AnyFile) -> bool:
        # The delegate only understands its own handles; comparing a wrapper
        # against a plain handle must not fail spuriously.
        return self._delegate.is_same_file(unwrap(a), unwrap(b))

    def infer_binary_name(self, location: Location, file: AnyFile) -> str | None:
        return self._delegate.infer_binary_name(location, unwrap(file))

    def location_of(self, file: AnyFile) -> Location | None:
        return self._delegate.location_of(unwrap(file))

    def list(
        self,
        location: Location,
        package_name: str,
        kinds: set[FileKind],
        recurse: bool = False,
    ) -> list[AnyFile]:
        files = self._delegate.list(location, package_name, kinds, recurse)
        if location is Location.SOURCE_PATH:
            return [MonitoredFileObject(f, self._recorder) for f in files]
        return list(files)

    def get_java_file_for_input(
        self, location: Location, class_name: str, kind: FileKind
    ) -> AnyFile | None:
        file = self._delegate.get_java_file_for_input(location, class_name, kind)
        if file is None:
            return None
        if location is Location.SOURCE_PATH:
            return MonitoredFileObject(file, self._recorder)
        return file

    def find_source_candidate(self, file: AnyFile) -> MonitoredFileObject | None:
        """Find the monitored source-path file that is the same file as ``file``.

        The direct lookup answers for the first root holding the class. A file
        shadowed by an earlier root is searched for in its package listing.
        Anything that is neither found nor listed yields None.
        """
        binary_name = self.infer_binary_name(Location.SOURCE_PATH, file)
        if binary_name is None:
            return None
        found = self.get_java_file_for_input(Location.SOURCE_PATH, binary_name, FileKind.SOURCE)
        if isinstance(found, MonitoredFileObject) and self.is_same_file(found, file):
            return found
        package_name = binary_name.rpartition(".")[0]
        listing = self._listings.get(package_name)
        if listing is None:
            listing = self.list(Location.SOURCE_PATH, package_name, {FileKind.SOURCE})
            self._listings[package_name] = listing
        for candidate in listing:
            if isinstance(candidate, MonitoredFileObject) and self.is_same_file(candidate, file):
                return candidate
        log.debug("source_candidate_not_listed", path=unwrap(file).path, package=package_name)
        return None

    def close(self) -> None:
        self._listings.clear()

    def __enter__(self) -> MonitoringFileManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
