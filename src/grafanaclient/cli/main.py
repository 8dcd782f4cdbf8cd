"""
grafanaclient command line

Usage:
    grafanaclient <command> [args]

Converts dashboard templates and manages data sources and dashboards on a
Grafana server. Connection settings come from GRAFANA_* environment
variables (or .env) and can be overridden with --url/--user/--password.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from grafanaclient.config import Settings, get_settings
from grafanaclient.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grafanaclient", description="Grafana data source and dashboard client"
    )
    parser.add_argument("--url", help="Grafana base URL (env: GRAFANA_URL)")
    parser.add_argument("--user", help="Grafana user (env: GRAFANA_USER)")
    parser.add_argument("--password", help="Grafana password (env: GRAFANA_PASSWORD)")
    parser.add_argument("--log-level", help="Log level (env: GRAFANA_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command")

    convert_parser = subparsers.add_parser(
        "convert", help="Convert a TOML or JSON template into dashboard JSON"
    )
    convert_parser.add_argument("template", help="Path to the template file")
    convert_parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    convert_parser.add_argument(
        "--format", choices=["json", "yaml"], default="json", help="Output format"
    )

    upload_parser = subparsers.add_parser(
        "upload", help="Convert a template and upload the dashboard"
    )
    upload_parser.add_argument("template", help="Path to the template file")
    upload_parser.add_argument(
        "--no-overwrite",
        action="store_true",
        help="Fail instead of replacing an existing dashboard",
    )

    ds_parser = subparsers.add_parser("datasources", help="Manage data sources")
    ds_subparsers = ds_parser.add_subparsers(dest="datasources_command")
    ds_subparsers.add_parser("list", help="List data sources")
    ds_get = ds_subparsers.add_parser("get", help="Show a data source")
    ds_get.add_argument("name", help="Data source name")
    ds_delete = ds_subparsers.add_parser("delete", help="Delete a data source")
    ds_delete.add_argument("name", help="Data source name")

    db_parser = subparsers.add_parser("dashboards", help="Manage dashboards")
    db_subparsers = db_parser.add_subparsers(dest="dashboards_command")
    db_get = db_subparsers.add_parser("get", help="Print a dashboard as JSON")
    db_get.add_argument("slug", help="Dashboard slug")
    db_delete = db_subparsers.add_parser("delete", help="Delete a dashboard")
    db_delete.add_argument("slug", help="Dashboard slug")

    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    overrides = {
        key: value
        for key, value in (
            ("url", args.url),
            ("user", args.user),
            ("password", args.password),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    return get_settings().model_copy(update=overrides)


def run(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the selected command, returning its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _resolve_settings(args)
    configure_logging(settings.log_level.upper())

    if args.command == "convert":
        from grafanaclient.cli.template import convert_command

        return convert_command(args.template, output=args.output, fmt=args.format)

    if args.command == "upload":
        from grafanaclient.cli.template import upload_command

        return upload_command(settings, args.template, overwrite=not args.no_overwrite)

    if args.command == "datasources":
        from grafanaclient.cli.datasources import (
            delete_datasource_command,
            get_datasource_command,
            list_datasources_command,
        )

        if args.datasources_command == "list":
            return list_datasources_command(settings)
        if args.datasources_command == "get":
            return get_datasource_command(settings, args.name)
        if args.datasources_command == "delete":
            return delete_datasource_command(settings, args.name)

    if args.command == "dashboards":
        from grafanaclient.cli.dashboards import delete_dashboard_command, get_dashboard_command

        if args.dashboards_command == "get":
            return get_dashboard_command(settings, args.slug)
        if args.dashboards_command == "delete":
            return delete_dashboard_command(settings, args.slug)

    parser.print_help()
    return 1


def main(argv: Sequence[str] | None = None) -> None:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
