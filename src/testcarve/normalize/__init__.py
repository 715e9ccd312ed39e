"""Source tree normalization - canonical package trees made of symlinks."""

from testcarve.normalize.tree import (
    PACKAGE_PATTERN,
    SymbolicBridge,
    canonical_location,
    normalize,
    parse_package,
)

__all__ = [
    "PACKAGE_PATTERN",
    "SymbolicBridge",
    "canonical_location",
    "normalize",
    "parse_package",
]
