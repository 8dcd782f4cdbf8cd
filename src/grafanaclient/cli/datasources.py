"""CLI commands for Grafana data sources."""

from __future__ import annotations

from grafanaclient.cli import ux
from grafanaclient.config import Settings
from grafanaclient.core.errors import GrafanaError, main_with_error_handling
from grafanaclient.session import Session


@main_with_error_handling()
def list_datasources_command(settings: Settings) -> int:
    with Session.from_settings(settings) as session:
        session.do_logon()
        datasources = session.get_data_source_list()

    rows = [
        [str(ds.id), ds.name, ds.type, ds.url, "yes" if ds.is_default else ""]
        for ds in datasources
    ]
    ux.print_table("Data sources", ["ID", "Name", "Type", "URL", "Default"], rows)
    return 0


@main_with_error_handling()
def get_datasource_command(settings: Settings, name: str) -> int:
    with Session.from_settings(settings) as session:
        session.do_logon()
        ds = session.get_data_source(name)

    if ds is None:
        raise GrafanaError(404, f"Data source not found: {name}")

    ux.print_table(
        f"Data source {ds.name}",
        ["Field", "Value"],
        [
            ["id", str(ds.id)],
            ["type", ds.type],
            ["access", ds.access],
            ["url", ds.url],
            ["database", ds.database],
            ["user", ds.user],
            ["default", str(ds.is_default)],
        ],
    )
    return 0


@main_with_error_handling()
def delete_datasource_command(settings: Settings, name: str) -> int:
    with Session.from_settings(settings) as session:
        session.do_logon()
        ds = session.get_data_source(name)
        if ds is None:
            raise GrafanaError(404, f"Data source not found: {name}")
        session.delete_data_source(ds)

    ux.success(f"Data source '{name}' deleted")
    return 0
