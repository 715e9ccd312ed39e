"""Core module exports."""

from testcarve.core.errors import (
    CarveError,
    ConfigError,
    ErrorCode,
    ExtractionError,
    InternalError,
    OracleError,
)
from testcarve.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    set_request_id,
)
from testcarve.core.progress import pluralize, status, task

__all__ = [
    # Errors
    "CarveError",
    "ConfigError",
    "ErrorCode",
    "ExtractionError",
    "InternalError",
    "OracleError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "set_request_id",
    # Progress
    "pluralize",
    "status",
    "task",
]
