# rupeebook/outputs/csv_output.py

import csv
import logging
import os

from rupeebook.outputs.base import BaseOutput
from rupeebook.outputs.formatter import report_filename, sheet_rows

logger = logging.getLogger(__name__)


class CSVOutput(BaseOutput):
    """
    Writes a report to <book>_<Report_Title>_<date>.csv with the same rows as
    the Excel export: heading, filters, the report table and the totals.
    """

    def write(self, report, generated_by=""):
        out_path = os.path.join(self.output_dir, report_filename(report, "csv"))
        rows = sheet_rows(report, self.settings, generated_by)
        with open(out_path, 'w', newline='', encoding='utf-8') as f:
            csv.writer(f).writerows(rows)
        logger.info("Written %d report rows to %s", len(report.data), out_path)
        return out_path
