"""Grafana data models.

Typed Python models for the JSON structures exchanged with the Grafana
2.x/3.x HTTP API: data sources, plugins and legacy row-based dashboards.

``to_dict()`` renders the server representation (camelCase keys).
``from_dict()`` accepts that representation as well as the snake_case and
singular keys used by TOML templates (``row``, ``panel``, ``metric``...).

Field defaults are the zero values of an absent JSON key. The ``new_*``
factories return the populated defaults used when expanding templates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _get(data: dict[str, Any], key: str, default: Any = None, *aliases: str) -> Any:
    """Look up ``key`` under its camelCase, snake_case and alias spellings."""
    if not isinstance(data, dict):
        raise TypeError(f"expected a table for {key!r}, got {type(data).__name__}")
    for candidate in (key, _snake_case(key), *aliases):
        if candidate in data:
            return data[candidate]
    return default


def is_zero(value: Any) -> bool:
    """True when ``value`` equals the zero value of its type."""
    if value is None:
        return True
    return value == type(value)()


@dataclass
class DataSource:
    """Connection descriptor for a Grafana data source."""

    id: int = 0
    org_id: int = 0
    name: str = ""
    type: str = ""
    access: str = ""
    url: str = ""
    password: str = ""
    user: str = ""
    database: str = ""
    basic_auth: bool = False
    basic_auth_user: str = ""
    basic_auth_password: str = ""
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "orgId": self.org_id,
            "name": self.name,
            "type": self.type,
            "access": self.access,
            "url": self.url,
            "password": self.password,
            "user": self.user,
            "database": self.database,
            "basicAuth": self.basic_auth,
            "basicAuthUser": self.basic_auth_user,
            "basicAuthPassword": self.basic_auth_password,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataSource:
        return cls(
            id=_get(data, "id", 0, "Id"),
            org_id=_get(data, "orgId", 0),
            name=_get(data, "name", ""),
            type=_get(data, "type", ""),
            access=_get(data, "access", ""),
            url=_get(data, "url", ""),
            password=_get(data, "password", ""),
            user=_get(data, "user", ""),
            database=_get(data, "database", ""),
            basic_auth=_get(data, "basicAuth", False),
            basic_auth_user=_get(data, "basicAuthUser", ""),
            basic_auth_password=_get(data, "basicAuthPassword", ""),
            is_default=_get(data, "isDefault", False),
        )


@dataclass
class Login:
    """Body of the ``/login`` request."""

    user: str = ""
    email: str = ""
    password: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user, "email": self.email, "password": self.password}


@dataclass
class Annotation:
    enable: bool = False
    items: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"enable": self.enable, "list": list(self.items)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        return cls(enable=_get(data, "enable", False), items=list(_get(data, "list", None) or []))


@dataclass
class PluginPartial:
    annotations: str = ""
    config: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PluginPartial:
        return cls(annotations=_get(data, "annotations", ""), config=_get(data, "config", ""))


@dataclass
class DataSourcePlugin:
    """Entry of the ``/api/datasources/plugins`` map (Grafana 2.x)."""

    name: str = ""
    type: str = ""
    module: str = ""
    plugin_type: str = ""
    service_name: str = ""
    annotations: Annotation = field(default_factory=Annotation)
    partials: PluginPartial = field(default_factory=PluginPartial)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataSourcePlugin:
        return cls(
            name=_get(data, "name", ""),
            type=_get(data, "type", ""),
            module=_get(data, "module", ""),
            plugin_type=_get(data, "pluginType", ""),
            service_name=_get(data, "serviceName", ""),
            annotations=Annotation.from_dict(_get(data, "annotations", None) or {}),
            partials=PluginPartial.from_dict(_get(data, "partials", None, "Partials") or {}),
        )


@dataclass
class Plugin:
    """Entry of the ``/api/plugins`` list (Grafana 3.x)."""

    name: str = ""
    type: str = ""
    id: str = ""
    enabled: bool = False
    pinned: bool = False
    info: dict[str, Any] = field(default_factory=dict)
    latest_version: str = ""
    has_update: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plugin:
        return cls(
            name=_get(data, "name", ""),
            type=_get(data, "type", ""),
            id=_get(data, "id", ""),
            enabled=_get(data, "enabled", False),
            pinned=_get(data, "pinned", False),
            info=dict(_get(data, "info", None) or {}),
            latest_version=_get(data, "latestVersion", ""),
            has_update=_get(data, "hasUpdate", False),
        )


@dataclass
class Tag:
    """Filter predicate of a target. Order matters for AND/OR chaining."""

    key: str = ""
    value: str = ""
    condition: str = ""

    def to_dict(self) -> dict[str, Any]:
        result = {"key": self.key, "value": self.value}
        if self.condition:
            result["condition"] = self.condition
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(
            key=_get(data, "key", ""),
            value=_get(data, "value", ""),
            condition=_get(data, "condition", ""),
        )


@dataclass
class GroupBy:
    """One element of an InfluxDB ``GROUP BY`` clause."""

    type: str = ""
    params: list[str] = field(default_factory=list)
    interval: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type, "params": list(self.params)}
        if self.interval:
            result["interval"] = self.interval
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GroupBy:
        return cls(
            type=_get(data, "type", ""),
            params=list(_get(data, "params", None) or []),
            interval=_get(data, "interval", ""),
        )


@dataclass
class Select:
    type: str = ""
    params: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "params": list(self.params)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Select:
        return cls(type=_get(data, "type", ""), params=list(_get(data, "params", None) or []))


@dataclass
class Target:
    """InfluxDB query target for a panel."""

    measurement: str = ""
    alias: str = ""
    hide: bool = False
    tags: list[Tag] = field(default_factory=list)
    group_by: list[GroupBy] = field(default_factory=list)
    select: list[list[Select]] = field(default_factory=list)
    ds_type: str = ""
    transform: str = ""

    def tag_keys(self) -> list[str]:
        """Keys of the tag filters, in order."""
        return [tag.key for tag in self.tags]

    def filter_by_tag(self, key: str, value: str) -> None:
        self.tags.append(Tag(key=key, value=value))

    def group_by_tag(self, tag: str) -> None:
        """Group by ``tag``, seeding the time bucket on first use."""
        if not self.group_by:
            self.group_by = new_group_by()
        self.group_by.append(GroupBy(type="tag", params=[tag]))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "alias": self.alias,
            "hide": self.hide,
            "measurement": self.measurement,
            "groupBy": [g.to_dict() for g in self.group_by],
            "tags": [t.to_dict() for t in self.tags],
        }
        if self.select:
            result["select"] = [[s.to_dict() for s in part] for part in self.select]
        if self.ds_type:
            result["dsType"] = self.ds_type
        if self.transform:
            result["transform"] = self.transform
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Target:
        return cls(
            measurement=_get(data, "measurement", ""),
            alias=_get(data, "alias", ""),
            hide=_get(data, "hide", False),
            tags=[Tag.from_dict(t) for t in _get(data, "tags", None, "tag") or []],
            group_by=[GroupBy.from_dict(g) for g in _get(data, "groupBy", None) or []],
            select=[
                [Select.from_dict(s) for s in part] for part in _get(data, "select", None) or []
            ],
            ds_type=_get(data, "dsType", ""),
            transform=_get(data, "transform", ""),
        )


@dataclass
class Metric:
    """Template-only shorthand expanded into a Target; never sent to Grafana."""

    measurement: str = ""
    fields: list[str] = field(default_factory=list)
    hosts: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Metric:
        fields = _get(data, "fields", [])
        hosts = _get(data, "hosts", [])
        return cls(
            measurement=_get(data, "measurement", ""),
            fields=list(fields) if isinstance(fields, list) else fields,
            hosts=list(hosts) if isinstance(hosts, list) else hosts,
        )


@dataclass
class SeriesOverride:
    alias: str = ""
    stack: bool = False
    fill: int = 0
    transform: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "alias": self.alias,
            "stack": self.stack,
            "fill": self.fill,
            "transform": self.transform,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SeriesOverride:
        return cls(
            alias=_get(data, "alias", ""),
            stack=_get(data, "stack", False),
            fill=_get(data, "fill", 0),
            transform=_get(data, "transform", ""),
        )


@dataclass
class Legend:
    show: bool = False
    values: bool = False
    min: bool = False
    max: bool = False
    current: bool = False
    total: bool = False
    avg: bool = False
    align_as_table: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "show": self.show,
            "values": self.values,
            "min": self.min,
            "max": self.max,
            "current": self.current,
            "total": self.total,
            "avg": self.avg,
            "alignAsTable": self.align_as_table,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Legend:
        return cls(
            show=_get(data, "show", False),
            values=_get(data, "values", False),
            min=_get(data, "min", False),
            max=_get(data, "max", False),
            current=_get(data, "current", False),
            total=_get(data, "total", False),
            avg=_get(data, "avg", False),
            align_as_table=_get(data, "alignAsTable", False),
        )


@dataclass
class Tooltip:
    value_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"value_type": self.value_type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tooltip:
        return cls(value_type=_get(data, "valueType", "", "value_type"))


@dataclass
class Panel:
    """Dashboard panel: a graph, a text block or a single stat."""

    title: str = ""
    type: str = ""
    id: int = 0
    span: int = 0
    editable: bool = False
    error: bool = False
    content: str = ""
    mode: str = ""
    fill: int = 0
    stack: bool = False
    targets: list[Target] = field(default_factory=list)
    metrics: list[Metric] = field(default_factory=list)
    series_overrides: list[SeriesOverride] = field(default_factory=list)
    tooltip: Tooltip = field(default_factory=Tooltip)
    legend: Legend = field(default_factory=Legend)
    page_size: int = 0
    left_y_axis_label: str = ""
    right_y_axis_label: str = ""
    datasource: str = ""
    null_point_mode: str = ""
    value_name: str = ""
    lines: bool = False
    linewidth: int = 0
    points: bool = False
    pointradius: int = 0
    bars: bool = False
    percentage: bool = False
    stepped_line: bool = False
    time_from: Any = None
    time_shift: Any = None

    def add_target(self, target: Target) -> None:
        self.targets.append(target)

    def to_dict(self) -> dict[str, Any]:
        """Convert to Grafana JSON format. Metric shorthand is not emitted."""
        result: dict[str, Any] = {
            "content": self.content,
            "editable": self.editable,
            "error": self.error,
            "id": self.id,
            "mode": self.mode,
            "span": self.span,
            "style": {},
            "title": self.title,
            "type": self.type,
            "fill": self.fill,
            "stack": self.stack,
            "targets": [t.to_dict() for t in self.targets],
        }

        optional = {
            "seriesOverrides": [o.to_dict() for o in self.series_overrides],
            "tooltip": None if is_zero(self.tooltip) else self.tooltip.to_dict(),
            "pageSize": self.page_size,
            "legend": None if is_zero(self.legend) else self.legend.to_dict(),
            "leftYAxisLabel": self.left_y_axis_label,
            "rightYAxisLabel": self.right_y_axis_label,
            "datasource": self.datasource,
            "nullPointMode": self.null_point_mode,
            "valueName": self.value_name,
            "lines": self.lines,
            "linewidth": self.linewidth,
            "points": self.points,
            "pointradius": self.pointradius,
            "bars": self.bars,
            "percentage": self.percentage,
            "steppedLine": self.stepped_line,
            "timeFrom": self.time_from,
            "timeShift": self.time_shift,
        }
        result.update({k: v for k, v in optional.items() if v})
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Panel:
        return cls(
            title=_get(data, "title", ""),
            type=_get(data, "type", ""),
            id=_get(data, "id", 0),
            span=_get(data, "span", 0),
            editable=_get(data, "editable", False),
            error=_get(data, "error", False),
            content=_get(data, "content", ""),
            mode=_get(data, "mode", ""),
            fill=_get(data, "fill", 0),
            stack=_get(data, "stack", False),
            targets=[Target.from_dict(t) for t in _get(data, "targets", None, "target") or []],
            metrics=[Metric.from_dict(m) for m in _get(data, "metrics", None, "metric") or []],
            series_overrides=[
                SeriesOverride.from_dict(o)
                for o in _get(data, "seriesOverrides", None, "override") or []
            ],
            tooltip=Tooltip.from_dict(_get(data, "tooltip", None) or {}),
            legend=Legend.from_dict(_get(data, "legend", None) or {}),
            page_size=_get(data, "pageSize", 0),
            left_y_axis_label=_get(data, "leftYAxisLabel", ""),
            right_y_axis_label=_get(data, "rightYAxisLabel", ""),
            datasource=_get(data, "datasource", "") or "",
            null_point_mode=_get(data, "nullPointMode", ""),
            value_name=_get(data, "valueName", ""),
            lines=_get(data, "lines", False),
            linewidth=_get(data, "linewidth", 0),
            points=_get(data, "points", False),
            pointradius=_get(data, "pointradius", 0),
            bars=_get(data, "bars", False),
            percentage=_get(data, "percentage", False),
            stepped_line=_get(data, "steppedLine", False),
            time_from=_get(data, "timeFrom", None),
            time_shift=_get(data, "timeShift", None),
        )


@dataclass
class Row:
    """Dashboard row (container for panels)."""

    title: str = ""
    height: str = ""
    editable: bool = False
    collapse: bool = False
    panels: list[Panel] = field(default_factory=list)

    def add_panel(self, panel: Panel) -> None:
        self.panels.append(panel)

    def to_dict(self) -> dict[str, Any]:
        return {
            "collapse": self.collapse,
            "editable": self.editable,
            "height": self.height,
            "panels": [p.to_dict() for p in self.panels],
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Row:
        return cls(
            title=_get(data, "title", ""),
            height=_get(data, "height", ""),
            editable=_get(data, "editable", False),
            collapse=_get(data, "collapse", False),
            panels=[Panel.from_dict(p) for p in _get(data, "panels", None, "panel") or []],
        )


@dataclass
class Template:
    """Dashboard template variable."""

    name: str = ""
    type: str = ""
    query: str = ""
    datasource: str = ""
    refresh: str = ""
    refresh_on_load: bool = False
    regex: str = ""
    include_all: bool = False
    all_format: str = ""
    multi: bool = False
    multi_format: str = ""
    current: dict[str, Any] = field(default_factory=dict)
    options: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "allFormat": self.all_format,
            "datasource": self.datasource,
            "includeAll": self.include_all,
            "multi": self.multi,
            "multiFormat": self.multi_format,
            "name": self.name,
            "query": self.query,
            "refresh": self.refresh,
            "refresh_on_load": self.refresh_on_load,
            "regex": self.regex,
            "type": self.type,
        }
        if self.current:
            result["current"] = dict(self.current)
        if self.options:
            result["options"] = [dict(o) for o in self.options]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Template:
        return cls(
            name=_get(data, "name", ""),
            type=_get(data, "type", ""),
            query=_get(data, "query", ""),
            datasource=_get(data, "datasource", "") or "",
            refresh=_get(data, "refresh", ""),
            refresh_on_load=_get(data, "refreshOnLoad", False, "refresh_on_load"),
            regex=_get(data, "regex", ""),
            include_all=_get(data, "includeAll", False),
            all_format=_get(data, "allFormat", ""),
            multi=_get(data, "multi", False),
            multi_format=_get(data, "multiFormat", ""),
            current=dict(_get(data, "current", None) or {}),
            options=[dict(o) for o in _get(data, "options", None) or []],
        )


@dataclass
class Templating:
    items: list[Template] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"list": [t.to_dict() for t in self.items]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Templating:
        return cls(items=[Template.from_dict(t) for t in _get(data, "list", None, "template") or []])


@dataclass
class TimeRange:
    """Time frame of the data shown by a dashboard."""

    from_: str = ""
    to: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_, "to": self.to}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeRange:
        return cls(from_=_get(data, "from", ""), to=_get(data, "to", ""))


@dataclass
class Dashboard:
    """Legacy row-based Grafana dashboard."""

    title: str = ""
    id: int = 0
    original_title: str = ""
    editable: bool = False
    hide_controls: bool = False
    refresh: Any = ""
    style: str = ""
    timezone: str = ""
    schema_version: int = 0
    version: int = 0
    shared_crosshair: bool = False
    tags: list[Any] = field(default_factory=list)
    annotations: Annotation = field(default_factory=Annotation)
    templating: Templating = field(default_factory=Templating)
    time: TimeRange = field(default_factory=TimeRange)
    rows: list[Row] = field(default_factory=list)

    def add_row(self, row: Row) -> None:
        self.rows.append(row)

    def set_time_frame(self, start: datetime, end: datetime) -> None:
        """Use an absolute time frame, rendered as RFC 3339 timestamps."""
        self.time = TimeRange(from_=start.isoformat(), to=end.isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert to Grafana JSON format.

        A zero ``id`` is sent as null so Grafana allocates a new one.
        """
        result: dict[str, Any] = {
            "id": self.id or None,
            "title": self.title,
            "originalTitle": self.original_title,
            "editable": self.editable,
            "hideControls": self.hide_controls,
            "refresh": self.refresh,
            "style": self.style,
            "timezone": self.timezone,
            "schemaVersion": self.schema_version,
            "version": self.version,
            "sharedCrosshair": self.shared_crosshair,
            "tags": list(self.tags),
            "annotations": self.annotations.to_dict(),
            "time": self.time.to_dict(),
            "rows": [r.to_dict() for r in self.rows],
        }
        if not is_zero(self.templating):
            result["templating"] = self.templating.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dashboard:
        return cls(
            title=_get(data, "title", ""),
            id=_get(data, "id", 0) or 0,
            original_title=_get(data, "originalTitle", ""),
            editable=_get(data, "editable", False),
            hide_controls=_get(data, "hideControls", False),
            refresh=_get(data, "refresh", ""),
            style=_get(data, "style", ""),
            timezone=_get(data, "timezone", ""),
            schema_version=_get(data, "schemaVersion", 0),
            version=_get(data, "version", 0),
            shared_crosshair=_get(data, "sharedCrosshair", False),
            tags=list(_get(data, "tags", None) or []),
            annotations=Annotation.from_dict(_get(data, "annotations", None) or {}),
            templating=Templating.from_dict(_get(data, "templating", None, "templates") or {}),
            time=TimeRange.from_dict(_get(data, "time", None) or {}),
            rows=[Row.from_dict(r) for r in _get(data, "rows", None, "row") or []],
        )


@dataclass
class DashboardUploader:
    """Body of a dashboard creation request."""

    dashboard: Dashboard
    overwrite: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"dashboard": self.dashboard.to_dict(), "overwrite": self.overwrite}


@dataclass
class Meta:
    """Dashboard metadata returned alongside a dashboard."""

    slug: str = ""
    created: str = ""
    expires: str = ""
    is_home: bool = False
    is_snapshot: bool = False
    is_starred: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Meta:
        return cls(
            slug=_get(data, "slug", ""),
            created=_get(data, "created", ""),
            expires=_get(data, "expires", ""),
            is_home=_get(data, "isHome", False),
            is_snapshot=_get(data, "isSnapshot", False),
            is_starred=_get(data, "isStarred", False),
        )


@dataclass
class DashboardResult:
    """Response of a dashboard lookup: the dashboard plus its metadata."""

    meta: Meta
    dashboard: Dashboard

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DashboardResult:
        return cls(
            meta=Meta.from_dict(data.get("meta") or {}),
            dashboard=Dashboard.from_dict(data.get("dashboard") or data.get("model") or {}),
        )


def new_row() -> Row:
    """Create a row with default display values."""
    return Row(height="200px", editable=True)


def new_panel() -> Panel:
    """Create a graph panel with default display values."""
    return Panel(
        span=6,
        type="graph",
        editable=True,
        fill=0,
        legend=new_legend(),
        null_point_mode="connected",
    )


def new_target() -> Target:
    return Target(alias="$tag_host $tag_name", ds_type="influxdb")


def new_legend() -> Legend:
    return Legend(show=True)


def new_series_override(alias: str) -> SeriesOverride:
    return SeriesOverride(alias=alias)


def new_time_range() -> TimeRange:
    """Default look-back window: the last 24 hours."""
    return TimeRange(from_="now-24h", to="now")


def new_template() -> Template:
    return Template(
        type="query",
        refresh="1",
        all_format="regex values",
        multi_format="regex values",
    )


def new_group_by() -> list[GroupBy]:
    """Group-by clause holding only the automatic time bucket."""
    return [GroupBy(type="time", interval="auto")]


__all__ = [
    "Annotation",
    "Dashboard",
    "DashboardResult",
    "DashboardUploader",
    "DataSource",
    "DataSourcePlugin",
    "GroupBy",
    "Legend",
    "Login",
    "Meta",
    "Metric",
    "Panel",
    "Plugin",
    "PluginPartial",
    "Row",
    "Select",
    "SeriesOverride",
    "Tag",
    "Target",
    "Template",
    "Templating",
    "TimeRange",
    "Tooltip",
    "is_zero",
    "new_group_by",
    "new_legend",
    "new_panel",
    "new_row",
    "new_series_override",
    "new_target",
    "new_template",
    "new_time_range",
]
