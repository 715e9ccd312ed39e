"""testcarve error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Oracle (compiler invocation)
- 4xxx: Extraction (normalization, copy, assembly)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004
    CONFIG_INVALID_CORPUS = 2005
    CONFIG_INVALID_OUTPUT = 2006
    CONFIG_UNKNOWN_TEST = 2007

    # Oracle (3xxx)
    ORACLE_COMPILER_NOT_FOUND = 3001

    # Extraction (4xxx)
    EXTRACT_COPY_FAILED = 4001
    EXTRACT_LINK_FAILED = 4002
    EXTRACT_OUTSIDE_CORPUS = 4003
    EXTRACT_TEMPLATE_MISSING = 4004
    EXTRACT_WRITE_FAILED = 4005

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class CarveError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CarveError):
    """Configuration and invocation errors. Always fatal, reported before any output."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required argument: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_corpus(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_CORPUS,
            message=f"Wrong corpus dir (needs src/ and tests/): {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_output(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_OUTPUT,
            message=f"Wrong output dir (must be an existing directory): {path}",
            details={"path": path},
        )

    @classmethod
    def unknown_test(cls, name: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_UNKNOWN_TEST,
            message=f"Wrong test name: {name}",
            details={"test": name},
        )


class OracleError(CarveError):
    """Errors starting the compiler. Compilation diagnostics are never errors."""

    @classmethod
    def compiler_not_found(cls, executable: str) -> "OracleError":
        return cls(
            code=ErrorCode.ORACLE_COMPILER_NOT_FOUND,
            message=f"Java compiler not found: {executable}",
            details={"executable": executable},
        )


class ExtractionError(CarveError):
    """Filesystem errors during normalization or assembly. These abort the run."""

    @classmethod
    def copy_failed(cls, src: str, dest: str, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACT_COPY_FAILED,
            message=f"Failed to copy {src} -> {dest}: {reason}",
            details={"src": src, "dest": dest, "reason": reason},
        )

    @classmethod
    def link_failed(cls, link: str, target: str, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACT_LINK_FAILED,
            message=f"Failed to link {link} -> {target}: {reason}",
            details={"link": link, "target": target, "reason": reason},
        )

    @classmethod
    def outside_corpus(cls, path: str, corpus_root: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACT_OUTSIDE_CORPUS,
            message=f"Dependency {path} is outside corpus {corpus_root}",
            details={"path": path, "corpus_root": corpus_root},
        )

    @classmethod
    def write_failed(cls, path: str, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACT_WRITE_FAILED,
            message=f"Failed to write {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def template_missing(cls, name: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACT_TEMPLATE_MISSING,
            message=f"Bundled template missing: {name}",
            details={"template": name},
        )


class InternalError(CarveError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
