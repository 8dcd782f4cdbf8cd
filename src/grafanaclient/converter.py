"""Template to dashboard conversion.

A template is a dashboard document, written in TOML or JSON, that may omit
most display settings and describe its queries with ``metric`` shorthand::

    title = "System"

    [[row]]
    title = "CPU"

      [[row.panel]]
      title = "CPU busy"

        [[row.panel.metric]]
        measurement = "cpu"
        fields = ["busy"]
        hosts = ["host1", "host2"]

Converting fills rows and panels with default display values, expands every
metric into an InfluxDB target and applies the default time window.
"""

from __future__ import annotations

import copy
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import structlog

from grafanaclient.core.errors import MergeError, TemplateParseError, TemplateReadError
from grafanaclient.models import (
    Dashboard,
    GroupBy,
    Legend,
    Metric,
    Panel,
    Row,
    Tag,
    Target,
    Template,
    TimeRange,
    is_zero,
    new_panel,
    new_row,
    new_target,
    new_template,
    new_time_range,
)

logger = structlog.get_logger()

LEGEND_FLAGS = ("show", "values", "min", "max", "current", "total", "avg", "align_as_table")


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of one decoding attempt: a document or an error message."""

    format: str
    document: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


def _decode_toml(buf: bytes) -> dict[str, Any]:
    return tomllib.loads(buf.decode("utf-8"))


def _decode_json(buf: bytes) -> dict[str, Any]:
    document = json.loads(buf)
    if not isinstance(document, dict):
        raise ValueError(f"expected a JSON object, got {type(document).__name__}")
    # Grafana allocates dashboard ids; never reuse one from an export
    document.pop("id", None)
    return document


DECODERS: list[tuple[str, Callable[[bytes], dict[str, Any]]]] = [
    ("TOML", _decode_toml),
    ("JSON", _decode_json),
]


def _attempt(name: str, decoder: Callable[[bytes], dict[str, Any]], buf: bytes) -> DecodeResult:
    try:
        return DecodeResult(format=name, document=decoder(buf))
    except (ValueError, UnicodeDecodeError) as exc:
        return DecodeResult(format=name, error=str(exc))


def read_template(path: str | Path) -> bytes:
    """Read a template file as raw bytes."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise TemplateReadError(
            f"Unable to read template {path}: {exc.strerror or exc}",
            {"path": str(path)},
        ) from exc


def parse_template(buf: bytes) -> Dashboard:
    """Decode a template with the first format that accepts it.

    Raises:
        TemplateParseError: if every format rejects the document; the
            error lists each format's message.
    """
    errors: dict[str, str] = {}
    for name, decoder in DECODERS:
        result = _attempt(name, decoder, buf)
        if not result.ok:
            errors[result.format] = result.error or ""
            continue

        logger.debug("template_parsed", format=result.format)
        return _build_dashboard({"editable": True} | result.document)

    logger.warning("template_parse_failed", **{f"{k.lower()}_error": v for k, v in errors.items()})
    raise TemplateParseError(errors)


def _build_dashboard(document: dict[str, Any]) -> Dashboard:
    try:
        return Dashboard.from_dict(document)
    except (AttributeError, TypeError) as exc:
        raise MergeError(
            f"Template structure does not match the dashboard schema: {exc}"
        ) from exc


def _type_names(expected: tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in expected)


def _merge_field(value: Any, default: Any, expected: tuple[type, ...], name: str) -> Any:
    """Return ``default`` when ``value`` is zero, otherwise ``value``."""
    wrong_bool = isinstance(value, bool) and bool not in expected
    if not isinstance(value, expected) or wrong_bool:
        raise MergeError(
            f"Cannot merge defaults into {name}: expected {_type_names(expected)}, "
            f"got {type(value).__name__}",
            {"field": name},
        )
    return default if is_zero(value) else value


def merge_row_defaults(row: Row, defaults: Row) -> None:
    """Fill the zero-valued display fields of ``row`` from ``defaults``."""
    row.height = _merge_field(row.height, defaults.height, (str, int), "row.height")
    row.editable = _merge_field(row.editable, defaults.editable, (bool,), "row.editable")


def merge_legend_defaults(legend: Legend, defaults: Legend) -> None:
    """Fill the zero-valued flags of a panel legend from ``defaults``."""
    for name in LEGEND_FLAGS:
        value = _merge_field(
            getattr(legend, name), getattr(defaults, name), (bool,), f"panel.legend.{name}"
        )
        setattr(legend, name, value)


def merge_panel_defaults(panel: Panel, defaults: Panel) -> None:
    """Fill the zero-valued display fields of ``panel`` from ``defaults``."""
    panel.span = _merge_field(panel.span, defaults.span, (int, float), "panel.span")
    panel.type = _merge_field(panel.type, defaults.type, (str,), "panel.type")
    panel.editable = _merge_field(panel.editable, defaults.editable, (bool,), "panel.editable")
    panel.fill = _merge_field(panel.fill, defaults.fill, (int,), "panel.fill")
    if not isinstance(panel.legend, Legend):
        raise MergeError(
            f"Cannot merge defaults into panel.legend: expected Legend, "
            f"got {type(panel.legend).__name__}",
            {"field": "panel.legend"},
        )
    merge_legend_defaults(panel.legend, defaults.legend)
    panel.null_point_mode = _merge_field(
        panel.null_point_mode, defaults.null_point_mode, (str,), "panel.nullPointMode"
    )


def merge_template_defaults(template: Template, defaults: Template) -> None:
    """Fill the zero-valued fields of a template variable from ``defaults``."""
    template.type = _merge_field(template.type, defaults.type, (str,), "template.type")
    template.refresh = _merge_field(
        template.refresh, defaults.refresh, (str, int, bool), "template.refresh"
    )
    template.all_format = _merge_field(
        template.all_format, defaults.all_format, (str,), "template.allFormat"
    )
    template.multi_format = _merge_field(
        template.multi_format, defaults.multi_format, (str,), "template.multiFormat"
    )


def _alternation(values: Any, name: str) -> str:
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise MergeError(f"Metric {name} must be a list of strings", {"field": f"metric.{name}"})
    return "|".join(values)


def expand_metric(metric: Metric) -> Target:
    """Build the InfluxDB target described by a metric shorthand entry.

    Hosts and fields become regex alternations; the series are grouped by
    field name, then by host.
    """
    fields = _alternation(metric.fields, "fields")
    hosts = _alternation(metric.hosts, "hosts")

    target = new_target()
    target.measurement = metric.measurement
    target.tags.append(Tag(key="host", value=f"/{hosts}/"))
    target.tags.append(Tag(key="name", value=f"/{fields}/", condition="AND"))
    target.group_by = [
        GroupBy(type="tag", params=["name"]),
        GroupBy(type="tag", params=["host"]),
    ]
    return target


def expand_dashboard(dashboard: Dashboard) -> Dashboard:
    """Return a copy of ``dashboard`` with defaults applied and metrics expanded.

    The input is left untouched. Expanding an already expanded dashboard
    returns an equal dashboard.
    """
    result = copy.deepcopy(dashboard)

    for template in result.templating.items:
        merge_template_defaults(template, new_template())

    for row in result.rows:
        merge_row_defaults(row, new_row())
        for panel in row.panels:
            merge_panel_defaults(panel, new_panel())
            panel.targets.extend(expand_metric(metric) for metric in panel.metrics)
            panel.metrics = []

    if result.time == TimeRange():
        result.time = new_time_range()

    return result


def convert_template_string(text: str | bytes) -> Dashboard:
    """Convert an in-memory template into a dashboard ready for upload."""
    buf = text.encode("utf-8") if isinstance(text, str) else text
    return expand_dashboard(parse_template(buf))


def convert_template(path: str | Path) -> Dashboard:
    """Read a TOML or JSON template file and convert it into a dashboard."""
    dashboard = convert_template_string(read_template(path))
    logger.info(
        "template_converted",
        path=str(path),
        rows=len(dashboard.rows),
        panels=sum(len(row.panels) for row in dashboard.rows),
    )
    return dashboard


__all__ = [
    "DECODERS",
    "DecodeResult",
    "convert_template",
    "convert_template_string",
    "expand_dashboard",
    "expand_metric",
    "merge_legend_defaults",
    "merge_panel_defaults",
    "merge_row_defaults",
    "merge_template_defaults",
    "parse_template",
    "read_template",
]
