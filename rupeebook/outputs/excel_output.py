# rupeebook/outputs/excel_output.py

"""Excel output module backed by XlsxWriter.

A report is written to a single ``Report`` worksheet laid out top to
bottom: who generated it, the report title, the generation time, the
filters that were applied, the report table, and the cash-in/cash-out/net
totals. Amounts are written as numbers so the sheet can be summed again.
"""

from __future__ import annotations

import logging
import os

import xlsxwriter

from rupeebook.outputs.base import BaseOutput
from rupeebook.outputs.formatter import report_filename, sheet_rows, table

logger = logging.getLogger(__name__)


class ExcelOutput(BaseOutput):
    """Generate a local Excel workbook for one report."""

    SHEET = "Report"
    COLUMN_WIDTHS = (20, 30, 20, 20, 15, 15, 15, 15)

    def write(self, report, generated_by=""):
        out_path = os.path.join(self.output_dir, report_filename(report, "xlsx"))
        rows = sheet_rows(report, self.settings, generated_by)
        headers, _ = table(report, self.settings)
        header_idx = rows.index(headers)

        workbook = xlsxwriter.Workbook(out_path)
        amount_fmt = workbook.add_format({"num_format": "#,##0.00"})
        header_fmt = workbook.add_format({"bold": True, "bottom": 1})
        title_fmt = workbook.add_format({"bold": True})

        ws = workbook.add_worksheet(self.SHEET)
        for col, width in enumerate(self.COLUMN_WIDTHS):
            ws.set_column(col, col, width)

        for row_idx, row in enumerate(rows):
            if row_idx == header_idx:
                ws.write_row(row_idx, 0, row, header_fmt)
                continue
            for col, value in enumerate(row):
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    ws.write_number(row_idx, col, value, amount_fmt)
                elif row_idx < 2 and col == 0:
                    ws.write(row_idx, col, value, title_fmt)
                else:
                    ws.write(row_idx, col, value)

        ws.freeze_panes(header_idx + 1, 0)
        workbook.close()
        logger.info("Written Excel report %s", out_path)
        return out_path
