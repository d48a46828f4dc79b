import copy
import json
import textwrap
from datetime import datetime

import pytest

from rupeebook.config import DEFAULT_CONFIG
from rupeebook.errors import LoaderError
from rupeebook.loaders import get_loader
from rupeebook.loaders.entries_sheet import EntriesSheetLoader, parse_entry_date
from rupeebook.loaders.ledger_file import LedgerFileLoader

BOOK_YAML = """
book:
  id: shop
  name: Shop Cash
  balanceBefore: 100
  categories: [Sales, Food]
members:
  - {id: m1, name: Asha, role: owner}
  - {id: m2, name: Ravi, role: data-operator}
dataOperatorSettings:
  allowBackdatedEntries: never
  hideEntriesByOtherMembers: true
transactions:
  - {id: t1, date: "2024-01-01T09:00:00", type: in, amount: 1000, category: Sales, memberId: m1}
  - {id: t2, date: "2024-01-01T18:30:00", type: out, amount: "250", category: Food, subcategory: Lunch, remark: Team lunch, memberId: m2}
  - {date: "2024-01-02", type: out, amount: 20.5}
"""


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return str(path)


def test_registry_builds_loaders_from_config():
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    assert isinstance(get_loader("ledger", cfg), LedgerFileLoader)
    assert isinstance(get_loader("sheet", cfg), EntriesSheetLoader)
    with pytest.raises(KeyError):
        get_loader("amex", cfg)


def test_load_book_snapshot(tmp_path):
    ledger = LedgerFileLoader().load(write(tmp_path, "shop.yaml", BOOK_YAML))

    assert ledger.id == "shop"
    assert ledger.name == "Shop Cash"
    assert ledger.balance_before == 100.0
    assert ledger.categories == ["Sales", "Food"]
    assert [m.name for m in ledger.members] == ["Asha", "Ravi"]
    assert ledger.data_operator_settings.allow_backdated_entries == "never"
    assert ledger.data_operator_settings.hide_entries_by_other_members is True
    assert ledger.data_operator_settings.hide_net_balance_and_reports is False

    t1, t2, t3 = ledger.transactions
    assert t1.member_id == "m1"
    assert t2.amount == 250.0
    assert t2.subcategory == "Lunch"
    assert t3.id == "shop-3"
    assert t3.category == "Uncategorized"


def test_load_json_backup_picks_a_book(tmp_path):
    backup = {
        "members": [{"id": "m1", "name": "Asha", "role": "owner"}],
        "rupeebooks": [
            {"id": "b1", "name": "Home", "transactions": []},
            {"id": "b2", "name": "Shop", "balanceBefore": 5,
             "transactions": [{"id": "x", "date": "2024-03-01", "type": "in", "amount": 10}]},
        ],
        "dataOperatorSettings": {"hideNetBalanceAndReports": True},
    }
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(backup), encoding="utf-8")

    ledger = LedgerFileLoader().load(str(path), book="Shop")
    assert ledger.id == "b2"
    assert [tx.id for tx in ledger.transactions] == ["x"]
    assert ledger.balance_before == 5.0
    assert ledger.data_operator_settings.hide_net_balance_and_reports is True

    with pytest.raises(LoaderError, match="2 books"):
        LedgerFileLoader().load(str(path))
    with pytest.raises(LoaderError):
        LedgerFileLoader().load(str(path), book="Garage")


def test_plain_book_mapping(tmp_path):
    path = write(tmp_path, "plain.yaml", """
        id: petty
        name: Petty Cash
        transactions:
          - {id: p1, date: 2024-05-01, type: out, amount: 15}
    """)
    ledger = LedgerFileLoader({"uncategorized_label": "Misc"}).load(path)
    assert ledger.name == "Petty Cash"
    assert ledger.transactions[0].category == "Misc"
    assert ledger.transactions[0].parsed_date() == datetime(2024, 5, 1)


@pytest.mark.parametrize(
    "entry",
    [
        "{id: z, date: 2024-01-01, type: in, amount: lots}",
        "{id: z, date: 2024-01-01, type: in, amount: -5}",
        "{id: z, date: 2024-01-01, type: maybe, amount: 5}",
    ],
)
def test_invalid_entries_fail_loading(tmp_path, entry):
    path = write(tmp_path, "bad.yaml", f"transactions:\n  - {entry}\n")
    with pytest.raises(LoaderError):
        LedgerFileLoader().load(path)


def test_non_mapping_file_is_rejected(tmp_path):
    path = write(tmp_path, "list.yaml", "- 1\n- 2\n")
    with pytest.raises(LoaderError):
        LedgerFileLoader().load(path)


@pytest.mark.parametrize(
    "value, time_value, expected",
    [
        ("05-01-2024", None, datetime(2024, 1, 5)),
        ("2024-01-05", "03:15 PM", datetime(2024, 1, 5, 15, 15)),
        ("05 Jan 2024", "12:05 am", datetime(2024, 1, 5, 0, 5)),
        ("2024-01-05T10:30:00", None, datetime(2024, 1, 5, 10, 30)),
        ("yesterday", None, None),
        ("", None, None),
    ],
)
def test_parse_entry_date(value, time_value, expected):
    assert parse_entry_date(value, time_value) == expected


def test_sheet_with_cash_in_and_cash_out_columns(tmp_path):
    path = write(tmp_path, "cashbook.csv", """\
        Date,Time,Remark,Category,Cash In,Cash Out
        01-01-2024,09:00 AM,Opening sale,Sales,"1,000",
        02-01-2024,06:30 PM,Team lunch,Food,,250
        03-01-2024,,Refund,,-40,
        04-01-2024,,Swap,Sales,10,5
        not a date,,Broken,Food,10,
        05-01-2024,,Nothing,Food,,
    """)
    loader = EntriesSheetLoader({})
    txs = loader.load(path)

    assert [(tx.type, tx.amount) for tx in txs] == [
        ("in", 1000.0), ("out", 250.0), ("out", 40.0), ("in", 10.0), ("out", 5.0),
    ]
    assert txs[0].date == datetime(2024, 1, 1, 9, 0)
    assert txs[1].date == datetime(2024, 1, 2, 18, 30)
    assert txs[1].remark == "Team lunch"
    assert txs[2].category == "Uncategorized"
    assert len({tx.id for tx in txs}) == 5
    assert loader.skipped_rows == 2


def test_sheet_with_type_and_amount_columns(tmp_path):
    path = write(tmp_path, "entries.csv", """\
        Entry Date,Type,Amount,Category,Sub Category,Description,Member
        2024-02-01,Credit,500,Sales,,Invoice 7,m1
        2024-02-02,debit,₹ 75.50,Food,Snacks,Tea,m2
    """)
    txs = EntriesSheetLoader({}).load(path)

    assert [(tx.type, tx.amount) for tx in txs] == [("in", 500.0), ("out", 75.5)]
    assert txs[1].category == "Food"
    assert txs[1].subcategory == "Snacks"
    assert txs[1].remark == "Tea"
    assert txs[1].member_id == "m2"
    assert txs[0].subcategory is None


def test_sheet_column_overrides(tmp_path):
    path = write(tmp_path, "bank.csv", """\
        Posted,Narration,Credit,Debit
        01/02/2024,Salary,900,
    """)
    txs = EntriesSheetLoader({}).load(path, columns={"date": "Posted", "remark": "Narration"})
    assert txs[0].remark == "Salary"
    assert txs[0].type == "in"

    with pytest.raises(LoaderError, match="Memo"):
        EntriesSheetLoader({}).load(path, columns={"date": "Posted", "remark": "Memo"})


def test_sheet_without_amount_columns_is_rejected(tmp_path):
    path = write(tmp_path, "notes.csv", "Date,Remark\n2024-01-01,hello\n")
    with pytest.raises(LoaderError):
        EntriesSheetLoader({}).load(path)


def test_sheet_with_unknown_entry_type(tmp_path):
    path = write(tmp_path, "odd.csv", "Date,Type,Amount\n2024-01-01,sideways,5\n")
    with pytest.raises(LoaderError, match="sideways"):
        EntriesSheetLoader({}).load(path)
