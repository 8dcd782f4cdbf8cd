"""Core primitives shared by the client, converter and CLI."""

from grafanaclient.core.errors import (
    ConfigurationError,
    ExitCode,
    GrafanaClientError,
    GrafanaError,
    MergeError,
    TemplateParseError,
    TemplateReadError,
)

__all__ = [
    "ConfigurationError",
    "ExitCode",
    "GrafanaClientError",
    "GrafanaError",
    "MergeError",
    "TemplateParseError",
    "TemplateReadError",
]
