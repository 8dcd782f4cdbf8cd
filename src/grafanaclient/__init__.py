"""
grafanaclient - manage Grafana data sources and dashboards over the HTTP API.

Provides a cookie-authenticated ``Session`` for CRUD calls and a template
converter turning terse TOML/JSON dashboard templates into complete
dashboards.
"""

from grafanaclient.converter import convert_template, convert_template_string, expand_dashboard
from grafanaclient.core.errors import (
    GrafanaClientError,
    GrafanaError,
    MergeError,
    TemplateParseError,
    TemplateReadError,
)
from grafanaclient.models import (
    Dashboard,
    DashboardResult,
    DataSource,
    Metric,
    Panel,
    Row,
    Tag,
    Target,
)
from grafanaclient.session import Session

__version__ = "0.1.0"

__all__ = [
    "Dashboard",
    "DashboardResult",
    "DataSource",
    "GrafanaClientError",
    "GrafanaError",
    "MergeError",
    "Metric",
    "Panel",
    "Row",
    "Session",
    "Tag",
    "Target",
    "TemplateParseError",
    "TemplateReadError",
    "convert_template",
    "convert_template_string",
    "expand_dashboard",
]
