# rupeebook/outputs/html_output.py

import logging
import os
from datetime import datetime
from html import escape

from rupeebook.core.reports import ALL_ENTRIES
from rupeebook.outputs.base import BaseOutput
from rupeebook.outputs.formatter import (
    ENTRY_HEADERS,
    GENERATED_FMT,
    SUMMARY_LABELS,
    entry_cell,
    format_inr,
    report_filename,
    table,
)

logger = logging.getLogger(__name__)

_NUMERIC_COLUMNS = {"cash_in", "cash_out", "balance"}
_STYLE = (
    "body{font-family:sans-serif;color:#111;}"
    "table{border-collapse:collapse;width:100%;margin-bottom:20px;table-layout:fixed;}"
    "th,td{border:1px solid #ccc;padding:4px 8px;vertical-align:top;}"
    "th{background:#eee;text-align:left;}"
    "td.num,th.num{text-align:right;font-family:monospace;}"
    ".neg{color:#c00;}"
    "tr{break-inside:avoid;}"
)


def _num_cell(value):
    if value in ("", None):
        return "<td class='num'>-</td>"
    cls = "num neg" if value < 0 else "num"
    return f"<td class='{cls}'>{format_inr(value)}</td>"


class HTMLOutput(BaseOutput):
    """Generate a print-ready HTML page for a report, one table plus totals."""

    def _entries_table(self, report):
        columns = list(self.settings.columns)
        parts = ["<table><tr>"]
        for c in columns:
            cls = " class='num'" if c in _NUMERIC_COLUMNS else ""
            parts.append(f"<th{cls}>{ENTRY_HEADERS[c]}</th>")
        parts.append("</tr>")
        for row in report.data:
            parts.append("<tr>")
            for c in columns:
                if c == "date":
                    parts.append(f"<td>{row['date'].strftime('%d-%m-%y')}</td>")
                elif c in _NUMERIC_COLUMNS:
                    parts.append(_num_cell(entry_cell(row, c)))
                else:
                    parts.append(f"<td>{escape(str(entry_cell(row, c)))}</td>")
            parts.append("</tr>")
        parts.append("</table>")
        return parts

    def _summary_table(self, report):
        headers, rows = table(report, self.settings)
        parts = ["<table><tr>"]
        parts.append(f"<th>{headers[0]}</th>")
        parts.extend(f"<th class='num'>{h}</th>" for h in headers[1:])
        parts.append("</tr>")
        for row in rows:
            parts.append(f"<tr><td>{escape(str(row[0]))}</td>")
            parts.extend(_num_cell(value) for value in row[1:])
            parts.append("</tr>")
        parts.append("</table>")
        return parts

    def render(self, report, generated_by="", now=None):
        now = now or datetime.now()
        html_parts = [
            "<html><head><meta charset='UTF-8'>",
            f"<title>{escape(report.report_title)}</title>",
            f"<style>{_STYLE}</style>",
            "</head><body>",
        ]
        if self.settings.show_name_and_number and generated_by:
            html_parts.append(f"<h3>{escape(generated_by)}</h3>")
        html_parts.append(f"<h1>{escape(report.report_title)} for {escape(report.generated_for)}</h1>")
        html_parts.append(f"<p>Generated on: {now.strftime(GENERATED_FMT)}</p>")

        if self.settings.show_filters and report.filters_applied:
            html_parts.append("<h2>Filters Applied</h2><table>")
            for name, value in report.filters_applied:
                html_parts.append(f"<tr><th>{escape(name)}</th><td>{escape(value)}</td></tr>")
            html_parts.append("</table>")

        html_parts.append(f"<p>Total No. of entries: {len(report.data)}</p>")
        if report.report_type == ALL_ENTRIES:
            html_parts.extend(self._entries_table(report))
        else:
            html_parts.extend(self._summary_table(report))

        totals = report.summary.as_dict()
        html_parts.append("<table>")
        for label, key in SUMMARY_LABELS:
            html_parts.append(f"<tr><th>{label}</th>{_num_cell(totals[key])}</tr>")
        html_parts.append("</table>")

        html_parts.append("</body></html>")
        return "\n".join(html_parts)

    def write(self, report, generated_by=""):
        out_path = os.path.join(self.output_dir, report_filename(report, "html"))
        with open(out_path, 'w', encoding='utf-8') as f:
            f.write(self.render(report, generated_by))
        logger.info("Written %d report rows to %s", len(report.data), out_path)
        return out_path
