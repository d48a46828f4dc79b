# rupeebook/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

from rupeebook.errors import InvalidConfig

CONFIG_ENV_VAR = "RUPEEBOOK_CONFIG"

DEFAULT_CONFIG: Dict[str, object] = {
    "loaders": {
        "ledger": "rupeebook.loaders.ledger_file.LedgerFileLoader",
        "sheet": "rupeebook.loaders.entries_sheet.EntriesSheetLoader",
    },
    "output_modules": {
        "excel": "rupeebook.outputs.excel_output.ExcelOutput",
        "csv": "rupeebook.outputs.csv_output.CSVOutput",
        "html": "rupeebook.outputs.html_output.HTMLOutput",
    },
    "output_dir": "reports",
    "uncategorized_label": "Uncategorized",
    "timezone": "UTC",
    "members": {
        "default_name": "Owner",
        "aliases": {},
    },
    "report": {
        "columns": [
            "date",
            "remark",
            "category",
            "subcategory",
            "entry_by",
            "cash_in",
            "cash_out",
            "balance",
        ],
        "show_name_and_number": True,
        "show_filters": True,
    },
    "filters": {},
    "log_level": "INFO",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    """
    Read a YAML config file and fill in defaults for anything it leaves out.

    *path* falls back to ``$RUPEEBOOK_CONFIG``; with neither set, or when the
    file does not exist, the defaults are returned.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return copy.deepcopy(DEFAULT_CONFIG)
    target = Path(path)
    if not target.exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    with target.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise InvalidConfig(f"Config file {target} must contain a mapping")
    return _merge_defaults(data, DEFAULT_CONFIG)
