"""Compiler oracle - discover source files read by javac.

Exports:
    discover: Source-path files read while resolving entry units
    MonitoringFileManager: Forwarding manager with the interception seams
    parse_trace: javac -verbose output parser
"""

from testcarve.oracle.compiler import build_command, discover, replay
from testcarve.oracle.file_manager import Location, MonitoringFileManager, StandardFileManager
from testcarve.oracle.handles import (
    AccessKind,
    DependencyRecorder,
    FileHandle,
    FileKind,
    MonitoredFileObject,
    unwrap,
)
from testcarve.oracle.trace import EventKind, TraceEvent, parse_handle, parse_trace

__all__ = [
    "discover",
    "build_command",
    "replay",
    "Location",
    "MonitoringFileManager",
    "StandardFileManager",
    "AccessKind",
    "DependencyRecorder",
    "FileHandle",
    "FileKind",
    "MonitoredFileObject",
    "unwrap",
    "EventKind",
    "TraceEvent",
    "parse_handle",
    "parse_trace",
]
