#!/usr/bin/env python3
"""Rendering of packaging reports.

Two output formats are supported:
- text: a human-readable resource plan rendered with Jinja2
- yaml: the same data as a YAML document
"""

from typing import Any, Dict

import jinja2
import yaml

from kpackager.packager import PackagingReport

TEXT_TEMPLATE = """\
Package: {{ package_name or "(unnamed)" }}
Archives ({{ archives | length }}):
{% for archive in archives %}
  {{ archive.archive }} ({{ archive.entries | length }} matched)
{% endfor %}
Resources ({{ resources | length }}):
{% for resource in resources %}
  [{{ resource.kind }}] {{ resource.entry }}  <{{ resource.archive }}>
{% endfor %}
{% if configuration %}
Configuration: {{ configuration.entry }} <{{ configuration.archive }}>
{% for key, value in configuration.properties.items() %}
  {{ key }} = {{ value }}
{% endfor %}
{% else %}
Configuration: (none)
{% endif %}
{% for warning in warnings %}
Warning: {{ warning }}
{% endfor %}
"""

_environment = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)


def report_to_dict(report: PackagingReport) -> Dict[str, Any]:
    """Convert a packaging report into plain data.

    Args:
        report: Packaging report

    Returns:
        Dictionary of builtin types
    """
    configuration = None
    if report.configuration.found:
        configuration = {
            "archive": report.configuration.archive,
            "entry": report.configuration.entry_name,
            "properties": dict(report.configuration.properties),
        }

    return {
        "package_name": report.package_name,
        "archives": [
            {"archive": archive.archive, "entries": list(archive.entry_names)}
            for archive in report.resolution.archives
        ],
        "resources": [
            {
                "archive": resource.archive,
                "entry": resource.entry_name,
                "kind": resource.kind.value,
                "type": resource.kind.compiler_type,
            }
            for resource in report.resources
        ],
        "configuration": configuration,
        "warnings": [str(warning) for warning in report.warnings],
        "errors": [str(error) for error in report.errors],
    }


def render_text(report: PackagingReport) -> str:
    """Render a report as text."""
    template = _environment.from_string(TEXT_TEMPLATE)
    return template.render(**report_to_dict(report))


def render_yaml(report: PackagingReport) -> str:
    """Render a report as YAML."""
    return yaml.safe_dump(report_to_dict(report), sort_keys=False)


RENDERERS = {
    "text": render_text,
    "yaml": render_yaml,
}
