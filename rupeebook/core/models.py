# rupeebook/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from rupeebook.errors import InvalidConfig, InvalidFilter, InvalidTransaction
from rupeebook.utils import parse_timestamp

UNCATEGORIZED = "Uncategorized"

CASH_IN = "in"
CASH_OUT = "out"
ENTRY_TYPES = (CASH_IN, CASH_OUT)

ROLES = ("owner", "admin", "viewer", "data-operator")
BACKDATE_POLICIES = ("always", "never", "one-day-before")

ALL_ENTRY_COLUMNS = (
    "date",
    "remark",
    "category",
    "subcategory",
    "entry_by",
    "cash_in",
    "cash_out",
    "balance",
)


@dataclass(frozen=True)
class Transaction:
    id: str
    date: Union[datetime, date, str]
    type: str
    amount: float
    category: str = UNCATEGORIZED
    subcategory: Optional[str] = None
    remark: str = ""
    attachment_url: Optional[str] = None
    member_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        if self.type not in ENTRY_TYPES:
            raise InvalidTransaction(
                f"Transaction {self.id!r} has type {self.type!r}; expected 'in' or 'out'"
            )
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            raise InvalidTransaction(f"Transaction {self.id!r} amount must be a number")
        # NaN fails this comparison too
        if not self.amount > 0:
            raise InvalidTransaction(
                f"Transaction {self.id!r} amount must be positive, got {self.amount!r}"
            )

    def parsed_date(self, tz=None) -> Optional[datetime]:
        return parse_timestamp(self.date, tz)

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == CASH_IN else -self.amount


@dataclass(frozen=True)
class Member:
    id: str
    name: str
    role: str = "owner"


@dataclass
class DataOperatorSettings:
    allow_backdated_entries: str = "always"
    hide_net_balance_and_reports: bool = False
    hide_entries_by_other_members: bool = False
    allow_entry_editing: bool = False


@dataclass
class Ledger:
    """A RupeeBook: its entries plus the balance carried in from before them."""
    id: str
    name: str
    transactions: List[Transaction] = field(default_factory=list)
    balance_before: float = 0.0
    categories: List[str] = field(default_factory=list)
    subcategories: List[str] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    data_operator_settings: DataOperatorSettings = field(default_factory=DataOperatorSettings)


@dataclass
class FilterSpec:
    """
    Filter selection for the ledger view and reports.

    Empty lists and an empty search term place no constraint on the result.
    """
    type: str = "all"
    category: List[str] = field(default_factory=list)
    subcategory: List[str] = field(default_factory=list)
    members: List[str] = field(default_factory=list)
    date_from: Union[date, str, None] = None
    date_to: Union[date, str, None] = None
    search_term: str = ""

    def validate(self) -> "FilterSpec":
        if self.type not in ("all",) + ENTRY_TYPES:
            raise InvalidFilter(f"Filter type must be 'all', 'in' or 'out', got {self.type!r}")
        for name in ("category", "subcategory", "members"):
            value = getattr(self, name)
            if not isinstance(value, (list, tuple)):
                raise InvalidFilter(f"Filter field '{name}' must be a list, got {type(value).__name__}")
        if not isinstance(self.search_term, str):
            raise InvalidFilter("Filter field 'search_term' must be a string")
        for name in ("date_from", "date_to"):
            value = getattr(self, name)
            if value not in (None, "") and parse_timestamp(value) is None:
                raise InvalidFilter(f"Could not parse {name} {value!r}")
        return self

    def is_empty(self) -> bool:
        return (
            self.type == "all"
            and not self.category
            and not self.subcategory
            and not self.members
            and not self.date_from
            and not self.date_to
            and not self.search_term
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterSpec":
        data = data or {}
        spec = cls(
            type=data.get("type") or "all",
            category=list(data.get("category") or []),
            subcategory=list(data.get("subcategory") or []),
            members=list(data.get("members") or []),
            date_from=data.get("date_from") or data.get("dateFrom"),
            date_to=data.get("date_to") or data.get("dateTo"),
            search_term=data.get("search_term") or data.get("searchTerm") or "",
        )
        return spec.validate()


@dataclass(frozen=True)
class Summary:
    total_cash_in: float = 0.0
    total_cash_out: float = 0.0

    @property
    def net_balance(self) -> float:
        return self.total_cash_in - self.total_cash_out

    @classmethod
    def of(cls, transactions) -> "Summary":
        cash_in = sum(t.amount for t in transactions if t.type == CASH_IN)
        cash_out = sum(t.amount for t in transactions if t.type == CASH_OUT)
        return cls(total_cash_in=cash_in, total_cash_out=cash_out)

    def as_dict(self) -> Dict[str, float]:
        return {
            "total_cash_in": self.total_cash_in,
            "total_cash_out": self.total_cash_out,
            "net_balance": self.net_balance,
        }


@dataclass
class ReportSettings:
    columns: List[str] = field(default_factory=lambda: list(ALL_ENTRY_COLUMNS))
    show_name_and_number: bool = True
    show_filters: bool = True

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "ReportSettings":
        section = (config or {}).get("report") or {}
        columns = section.get("columns") or list(ALL_ENTRY_COLUMNS)
        unknown = [c for c in columns if c not in ALL_ENTRY_COLUMNS]
        if unknown:
            raise InvalidConfig(f"Unknown report column(s): {', '.join(unknown)}")
        return cls(
            columns=list(columns),
            show_name_and_number=bool(section.get("show_name_and_number", True)),
            show_filters=bool(section.get("show_filters", True)),
        )


@dataclass
class ReportResult:
    report_type: str
    report_title: str
    generated_for: str
    filters_applied: List[Tuple[str, str]]
    data: List[Dict[str, Any]]
    summary: Summary
    skipped: List[str] = field(default_factory=list)
