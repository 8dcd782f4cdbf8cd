"""CLI commands for Grafana dashboards."""

from __future__ import annotations

import json

from grafanaclient.cli import ux
from grafanaclient.config import Settings
from grafanaclient.core.errors import main_with_error_handling
from grafanaclient.session import Session


@main_with_error_handling()
def get_dashboard_command(settings: Settings, slug: str) -> int:
    """Print a dashboard's JSON model."""
    with Session.from_settings(settings) as session:
        session.do_logon()
        result = session.get_dashboard(slug)

    print(json.dumps(result.dashboard.to_dict(), indent=2))
    return 0


@main_with_error_handling()
def delete_dashboard_command(settings: Settings, slug: str) -> int:
    with Session.from_settings(settings) as session:
        session.do_logon()
        session.delete_dashboard(slug)

    ux.success(f"Dashboard '{slug}' deleted")
    return 0
