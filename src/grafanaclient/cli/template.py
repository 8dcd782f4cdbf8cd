"""CLI commands converting templates and uploading the resulting dashboards."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from grafanaclient.cli import ux
from grafanaclient.config import Settings
from grafanaclient.converter import convert_template
from grafanaclient.core.errors import main_with_error_handling
from grafanaclient.session import Session


@main_with_error_handling()
def convert_command(template: str, output: str | None = None, fmt: str = "json") -> int:
    """Convert a template and print or write the dashboard.

    Args:
        template: Path to a TOML or JSON template
        output: File to write; stdout when omitted
        fmt: ``json`` or ``yaml``

    Returns:
        Exit code
    """
    dashboard = convert_template(template).to_dict()
    if fmt == "yaml":
        rendered = yaml.safe_dump(dashboard, sort_keys=False)
    else:
        rendered = json.dumps(dashboard, indent=2)

    if output is None:
        print(rendered)
        return 0

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rendered)
    ux.success(f"Dashboard written to {output_path}")
    return 0


@main_with_error_handling()
def upload_command(settings: Settings, template: str, overwrite: bool = True) -> int:
    """Convert a template and upload the dashboard to Grafana."""
    dashboard = convert_template(template)
    with Session.from_settings(settings) as session:
        session.do_logon()
        session.upload_dashboard(dashboard, overwrite)
    ux.success(f"Dashboard '{dashboard.title}' uploaded to {settings.url}")
    return 0
