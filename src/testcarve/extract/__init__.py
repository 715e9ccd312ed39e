"""Test extraction - closure discovery and assembly.

Exports:
    build_request: Validate invocation arguments
    find_dependencies: Canonical dependency closure of one test
    extract_test: Discover and copy in one step
    assemble: Copy a closure plus build files to the output root
"""

from testcarve.extract.assembler import assemble, resolve_bridges
from testcarve.extract.models import (
    ChildKind,
    DependencySet,
    ExtractionContext,
    ExtractionRequest,
    ExtractionResult,
)
from testcarve.extract.orchestrator import extract_test, find_dependencies
from testcarve.extract.request import build_request, normalize_test_name

__all__ = [
    "assemble",
    "resolve_bridges",
    "ChildKind",
    "DependencySet",
    "ExtractionContext",
    "ExtractionRequest",
    "ExtractionResult",
    "extract_test",
    "find_dependencies",
    "build_request",
    "normalize_test_name",
]
