"""Tests for converter.py.

Template parsing, default merging and metric expansion.
"""

import json
from pathlib import Path

import pytest

from grafanaclient.converter import (
    DECODERS,
    convert_template,
    convert_template_string,
    expand_dashboard,
    expand_metric,
    merge_legend_defaults,
    merge_panel_defaults,
    merge_row_defaults,
    parse_template,
    read_template,
)
from grafanaclient.core.errors import MergeError, TemplateParseError, TemplateReadError
from grafanaclient.models import (
    Dashboard,
    GroupBy,
    Legend,
    Metric,
    Panel,
    Row,
    Tag,
    TimeRange,
    new_legend,
    new_panel,
    new_row,
)


class TestParseTemplate:
    """Tests for parse_template."""

    def test_decoders_try_toml_before_json(self):
        assert [name for name, _ in DECODERS] == ["TOML", "JSON"]

    def test_parses_toml_shorthand(self):
        dashboard = parse_template(
            b"""
title = "cpu"
[[row]]
  [[row.panel]]
  title = "p"
    [[row.panel.metric]]
    measurement = "cpu"
    fields = ["busy"]
    hosts = ["host1"]
"""
        )

        assert dashboard.title == "cpu"
        assert dashboard.rows[0].panels[0].metrics == [
            Metric(measurement="cpu", fields=["busy"], hosts=["host1"])
        ]

    def test_parses_json_and_clears_dashboard_id(self):
        document = {
            "id": 42,
            "title": "exported",
            "rows": [{"panels": [{"title": "p", "span": 4}]}],
        }

        dashboard = parse_template(json.dumps(document).encode())

        assert dashboard.title == "exported"
        assert dashboard.id == 0
        assert dashboard.rows[0].panels[0].span == 4

    def test_toml_keeps_dashboard_id(self):
        dashboard = parse_template(b'id = 7\ntitle = "t"\n')

        assert dashboard.id == 7

    def test_editable_defaults_to_true(self):
        assert parse_template(b'title = "t"\n').editable is True

    def test_explicit_editable_false_wins(self):
        assert parse_template(b'title = "t"\neditable = false\n').editable is False

    def test_malformed_template_names_both_errors(self):
        with pytest.raises(TemplateParseError) as exc_info:
            parse_template(b"this is { not a template")

        err = exc_info.value
        assert set(err.errors) == {"TOML", "JSON"}
        assert "TOML error:" in err.message
        assert "JSON error:" in err.message
        assert err.message.startswith("Unable to parse template:")

    def test_json_array_is_rejected(self):
        with pytest.raises(TemplateParseError) as exc_info:
            parse_template(b"[1, 2]")

        assert "expected a JSON object" in exc_info.value.errors["JSON"]

    def test_invalid_utf8_is_a_parse_error(self):
        with pytest.raises(TemplateParseError):
            parse_template(b"\xff\xfe\x00garbage")

    def test_structure_mismatch_is_a_merge_error(self):
        with pytest.raises(MergeError):
            parse_template(b'row = [1, 2]\n')

    def test_string_row_entry_is_a_merge_error(self):
        with pytest.raises(MergeError):
            parse_template(b'row = ["garbage"]\n')

    def test_string_metric_entry_is_a_merge_error(self):
        with pytest.raises(MergeError):
            convert_template_string('[[row]]\n[[row.panel]]\nmetric = ["cpu"]\n')


class TestReadTemplate:
    """Tests for read_template."""

    def test_reads_bytes(self, tmp_path):
        path = tmp_path / "t.toml"
        path.write_bytes(b'title = "t"\n')

        assert read_template(path) == b'title = "t"\n'

    def test_missing_file_raises(self, tmp_path):
        missing = tmp_path / "missing.toml"

        with pytest.raises(TemplateReadError) as exc_info:
            read_template(missing)

        assert exc_info.value.details == {"path": str(missing)}

    def test_directory_raises(self, tmp_path):
        with pytest.raises(TemplateReadError):
            read_template(tmp_path)


class TestMergeDefaults:
    """Tests for the per-type merge functions."""

    def test_row_zero_fields_get_defaults(self):
        row = Row(title="r")

        merge_row_defaults(row, new_row())

        assert row.height == "200px"
        assert row.editable is True
        assert row.title == "r"

    def test_row_explicit_height_survives(self):
        row = Row(height="350px")

        merge_row_defaults(row, new_row())

        assert row.height == "350px"

    def test_panel_zero_fields_get_defaults(self):
        panel = Panel(title="p")

        merge_panel_defaults(panel, new_panel())

        assert panel.span == 6
        assert panel.type == "graph"
        assert panel.editable is True
        assert panel.fill == 0
        assert panel.legend == Legend(show=True)
        assert panel.null_point_mode == "connected"

    def test_panel_explicit_fields_survive(self):
        legend = Legend(show=True, values=True, avg=True)
        panel = Panel(
            span=12,
            type="singlestat",
            fill=3,
            legend=legend,
            null_point_mode="null as zero",
        )

        merge_panel_defaults(panel, new_panel())

        assert panel.span == 12
        assert panel.type == "singlestat"
        assert panel.fill == 3
        assert panel.legend == legend
        assert panel.null_point_mode == "null as zero"

    def test_panel_defaults_are_not_shared(self):
        first, second = Panel(), Panel()
        defaults = new_panel()

        merge_panel_defaults(first, defaults)
        merge_panel_defaults(second, defaults)
        first.legend.values = True

        assert second.legend.values is False
        assert defaults.legend.values is False

    def test_partial_legend_gets_default_flags(self):
        legend = Legend(values=True)

        merge_legend_defaults(legend, new_legend())

        assert legend.show is True
        assert legend.values is True
        assert legend.avg is False

    def test_partial_legend_in_template_is_shown(self):
        dashboard = convert_template_string(
            '[[row]]\n[[row.panel]]\ntitle = "p"\n[row.panel.legend]\nvalues = true\n'
        )

        legend = dashboard.rows[0].panels[0].legend
        assert legend.show is True
        assert legend.values is True

    def test_wrong_legend_flag_type_raises_merge_error(self):
        panel = Panel(legend=Legend(values="yes"))

        with pytest.raises(MergeError) as exc_info:
            merge_panel_defaults(panel, new_panel())

        assert exc_info.value.details == {"field": "panel.legend.values"}

    def test_wrong_type_raises_merge_error(self):
        panel = Panel(span="six")

        with pytest.raises(MergeError) as exc_info:
            merge_panel_defaults(panel, new_panel())

        assert exc_info.value.details == {"field": "panel.span"}

    def test_bool_is_not_accepted_as_span(self):
        with pytest.raises(MergeError):
            merge_panel_defaults(Panel(span=True), new_panel())


class TestExpandMetric:
    """Tests for expand_metric."""

    def test_builds_influx_target(self):
        target = expand_metric(Metric(measurement="cpu", fields=["busy"], hosts=["host1", "host2"]))

        assert target.measurement == "cpu"
        assert target.tags == [
            Tag(key="host", value="/host1|host2/"),
            Tag(key="name", value="/busy/", condition="AND"),
        ]
        assert target.group_by == [
            GroupBy(type="tag", params=["name"]),
            GroupBy(type="tag", params=["host"]),
        ]
        assert target.alias == "$tag_host $tag_name"
        assert target.ds_type == "influxdb"

    def test_joins_multiple_fields(self):
        target = expand_metric(Metric(measurement="cpu", fields=["user", "sys"], hosts=["h"]))

        assert target.tags[1].value == "/user|sys/"
        assert target.tag_keys() == ["host", "name"]

    def test_string_fields_raise_merge_error(self):
        with pytest.raises(MergeError):
            expand_metric(Metric(measurement="cpu", fields="busy", hosts=["h"]))


class TestExpandDashboard:
    """Tests for expand_dashboard."""

    def test_one_target_per_metric(self):
        metrics = [
            Metric(measurement="cpu", fields=["busy"], hosts=["a"]),
            Metric(measurement="mem", fields=["used"], hosts=["a", "b"]),
            Metric(measurement="disk", fields=["io"], hosts=["c"]),
        ]
        existing = expand_metric(Metric(measurement="net", fields=["rx"], hosts=["a"]))
        panel = Panel(targets=[existing], metrics=metrics)
        dashboard = Dashboard(rows=[Row(panels=[panel])])

        result = expand_dashboard(dashboard)

        expanded = result.rows[0].panels[0]
        assert len(expanded.targets) == 4
        assert expanded.targets[0] == existing
        assert [t.measurement for t in expanded.targets[1:]] == ["cpu", "mem", "disk"]
        for target in expanded.targets[1:]:
            assert len(target.tags) == 2
            assert [g.params for g in target.group_by] == [["name"], ["host"]]
        assert expanded.metrics == []

    def test_input_is_not_modified(self):
        panel = Panel(metrics=[Metric(measurement="cpu", fields=["busy"], hosts=["a"])])
        dashboard = Dashboard(rows=[Row(panels=[panel])])

        expand_dashboard(dashboard)

        assert len(dashboard.rows[0].panels[0].metrics) == 1
        assert dashboard.rows[0].panels[0].targets == []
        assert dashboard.rows[0].height == ""

    def test_default_time_range(self):
        result = expand_dashboard(Dashboard())

        assert result.time == TimeRange(from_="now-24h", to="now")

    def test_explicit_time_field_is_untouched(self):
        result = expand_dashboard(Dashboard(time=TimeRange(from_="now-6h")))

        assert result.time == TimeRange(from_="now-6h", to="")

    def test_idempotent(self, simple_template):
        once = convert_template(simple_template)

        assert expand_dashboard(once) == once

    def test_template_variables_get_defaults(self):
        dashboard = convert_template_string(
            """
title = "vars"
[templates]
  [[templates.template]]
  name = "host"
  query = "SHOW TAG VALUES WITH KEY = host"
  datasource = "influx"
"""
        )

        template = dashboard.templating.items[0]
        assert template.name == "host"
        assert template.type == "query"
        assert template.refresh == "1"
        assert template.all_format == "regex values"
        assert template.multi_format == "regex values"


class TestConvertTemplate:
    """End-to-end conversion tests."""

    def test_single_metric_scenario(self, simple_template):
        dashboard = convert_template(simple_template)

        row = dashboard.rows[0]
        assert row.height == "200px"
        assert row.editable is True
        panel = row.panels[0]
        assert panel.span == 6
        assert panel.type == "graph"
        assert len(panel.targets) == 1
        target = panel.targets[0]
        assert target.measurement == "cpu"
        assert target.tags == [
            Tag(key="host", value="/host1|host2/"),
            Tag(key="name", value="/busy/", condition="AND"),
        ]
        assert target.group_by == [
            GroupBy(type="tag", params=["name"]),
            GroupBy(type="tag", params=["host"]),
        ]
        assert dashboard.time == TimeRange(from_="now-24h", to="now")
        assert dashboard.editable is True

    def test_serialized_panel_has_no_metric_shorthand(self, simple_template):
        payload = convert_template(simple_template).to_dict()

        panel = payload["rows"][0]["panels"][0]
        assert "metrics" not in panel
        assert panel["targets"][0]["groupBy"] == [
            {"type": "tag", "params": ["name"]},
            {"type": "tag", "params": ["host"]},
        ]
        assert panel["targets"][0]["tags"] == [
            {"key": "host", "value": "/host1|host2/"},
            {"key": "name", "value": "/busy/", "condition": "AND"},
        ]

    def test_json_template_with_metrics(self, tmp_path):
        path = tmp_path / "dash.json"
        path.write_text(
            json.dumps(
                {
                    "id": 3,
                    "title": "json",
                    "time": {"from": "now-1h", "to": "now"},
                    "rows": [
                        {
                            "height": "250px",
                            "panels": [
                                {
                                    "metrics": [
                                        {"measurement": "disk", "fields": ["io"], "hosts": ["h"]}
                                    ]
                                }
                            ],
                        }
                    ],
                }
            )
        )

        dashboard = convert_template(path)

        assert dashboard.id == 0
        assert dashboard.rows[0].height == "250px"
        assert dashboard.rows[0].panels[0].targets[0].measurement == "disk"
        assert dashboard.time == TimeRange(from_="now-1h", to="now")

    def test_missing_file(self, tmp_path):
        with pytest.raises(TemplateReadError):
            convert_template(tmp_path / "nope.toml")

    def test_wrong_metric_type_aborts(self):
        template = """
[[row]]
  [[row.panel]]
    [[row.panel.metric]]
    measurement = "cpu"
    fields = "busy"
    hosts = ["h"]
"""
        with pytest.raises(MergeError):
            convert_template_string(template)


EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


class TestExampleTemplates:
    """The templates shipped in examples/ convert cleanly."""

    def test_toml_example(self):
        dashboard = convert_template(EXAMPLES / "system.toml")

        assert dashboard.title == "System overview"
        assert [row.height for row in dashboard.rows] == ["200px", "300px"]
        panels = [panel for row in dashboard.rows for panel in row.panels]
        assert [panel.span for panel in panels] == [6, 12, 6]
        assert [len(panel.targets) for panel in panels] == [1, 1, 1]
        assert panels[1].stack is True
        assert panels[2].fill == 1
        assert panels[2].targets[0].tags[1].value == "/used|free/"

    def test_json_example(self):
        dashboard = convert_template(EXAMPLES / "system.json")

        assert dashboard.id == 0
        assert dashboard.time == TimeRange(from_="now-6h", to="now")
        assert dashboard.rows[0].panels[0].targets[0].measurement == "disk"
