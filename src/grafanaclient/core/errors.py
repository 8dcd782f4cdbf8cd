"""
Unified error handling for grafanaclient.

Library code raises the exceptions defined here; CLI commands convert them
into exit codes through ``main_with_error_handling``.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Server error (HTTP failure or unreachable Grafana)
- 12: Template error (unreadable or unparsable template)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    SERVER_ERROR = 11
    TEMPLATE_ERROR = 12
    UNKNOWN_ERROR = 127


class GrafanaClientError(Exception):
    """Base exception for grafanaclient errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GrafanaClientError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class GrafanaError(GrafanaClientError):
    """Error returned by the Grafana server or the transport.

    ``code`` is the HTTP status code, or 0 when the failure did not come
    from an HTTP response (connection refused, timeout, invalid payload).
    """

    exit_code = ExitCode.SERVER_ERROR

    def __init__(self, code: int, description: str):
        self.code = code
        self.description = description
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.code != 0:
            return f"HTTP {self.code}: {self.description}"
        return f"ERROR: {self.description}"


class TemplateReadError(GrafanaClientError):
    """Raised when a template file cannot be opened or read."""

    exit_code = ExitCode.TEMPLATE_ERROR


class TemplateParseError(GrafanaClientError):
    """Raised when a template matches none of the accepted formats."""

    exit_code = ExitCode.TEMPLATE_ERROR

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        lines = ["Unable to parse template:"]
        lines.extend(f"{fmt} error: {msg}" for fmt, msg in errors.items())
        super().__init__("\n".join(lines))


class MergeError(GrafanaClientError):
    """A template field has a type the defaults cannot be merged into.

    This is a defect in the template or in the caller, not a runtime
    condition to recover from.
    """

    exit_code = ExitCode.UNKNOWN_ERROR
    show_traceback = True


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - GrafanaClientError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except GrafanaClientError as e:
                from grafanaclient.cli.ux import error as print_error

                print_error(format_error_message(e))
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: GrafanaClientError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
