import csv
import json
import logging
from dataclasses import asdict
from enum import Enum
from html import escape

from vcenter_inventory.aggregate import summary_rows

logger = logging.getLogger(__name__)


def format_cell(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def write_table_csv(records, schema, path):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(schema.columns)
        for record in records:
            writer.writerow([format_cell(getattr(record, field.name)) for field in schema.fields])
    logger.info(f"Wrote {len(records)} {schema.kind} rows to {path}")
    return path


def write_summary_csv(summary, path):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Metric", "Value"])
        for label, value in summary_rows(summary):
            writer.writerow([label, format_cell(value)])
    logger.info(f"Wrote summary to {path}")
    return path


_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif; margin: 24px; }
    h1 { margin-top: 0; }
    .env { border: 1px solid #e3e3e3; border-radius: 12px; padding: 12px 16px; margin: 16px 0 24px; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 32px; }
    table thead th { text-align: left; background: #fafafa; border-bottom: 1px solid #e6e6e6; padding: 6px 8px; }
    table td, table th { padding: 6px 8px; border-bottom: 1px solid #f0f0f0; vertical-align: top; font-size: 13px; }
    tr:hover td { background: #fcfcfc; }
    .nodata { color: #888; font-style: italic; margin-bottom: 32px; }
    .footer { margin-top: 40px; color: #888; font-size: 12px; }
"""


def _kv_rows(pairs):
    return "".join(
        f"<tr><th>{escape(str(label))}</th><td>{escape(format_cell(value))}</td></tr>"
        for label, value in pairs
    )


def _record_section(schema, records):
    title = f"{schema.kind}s ({len(records)})"
    if not records:
        return f'<h2>{escape(title)}</h2>\n<p class="nodata">No data</p>'
    header = "".join(f"<th>{escape(column)}</th>" for column in schema.columns)
    rows = []
    for record in records:
        cells = "".join(f"<td>{escape(format_cell(getattr(record, field.name)))}</td>"
                        for field in schema.fields)
        rows.append(f"<tr>{cells}</tr>")
    body = "\n".join(rows)
    return (f"<h2>{escape(title)}</h2>\n<table>\n<thead><tr>{header}</tr></thead>\n"
            f"<tbody>\n{body}\n</tbody>\n</table>")


def render_html(record_sets, summary, connection, context):
    """Render a self-contained report. ``record_sets`` is a sequence of (schema, records)."""
    environment = [
        ("Endpoint", connection.endpoint if connection else context.endpoint),
        ("Server Version", connection.server_version if connection else "N/A"),
        ("Server Build", connection.server_build if connection else "N/A"),
        ("Connected As", connection.user if connection else "N/A"),
        ("Generated", context.started_at.strftime("%Y-%m-%d %H:%M:%S")),
    ]
    sections = "\n".join(_record_section(schema, records) for schema, records in record_sets)
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>vCenter Inventory Report - {escape(context.endpoint)}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <h1>vCenter Inventory Report</h1>
  <div class="env">
    <h2>Environment Summary</h2>
    <table class="kv">
      <tbody>
        {_kv_rows(environment)}
        {_kv_rows(summary_rows(summary))}
      </tbody>
    </table>
  </div>
{sections}
  <div class="footer">This report is read-only. No changes were made to the environment.</div>
</body>
</html>
"""


def write_html_report(record_sets, summary, connection, context, path):
    html = render_html(record_sets, summary, connection, context)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
    logger.info(f"Wrote HTML report to {path}")
    return path


def write_json_inventory(record_sets, summary, connection, path):
    data = {
        "connection": asdict(connection) if connection else None,
        "summary": asdict(summary),
    }
    for schema, records in record_sets:
        data[f"{schema.kind.lower()}s"] = [asdict(record) for record in records]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4, default=format_cell)
    logger.info(f"Inventory saved to {path}")
    return path
