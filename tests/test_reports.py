import copy
from datetime import datetime, timedelta, timezone

import pytest

from rupeebook.core.members import MemberResolver
from rupeebook.core.models import DataOperatorSettings, FilterSpec, Ledger, Member, Transaction
from rupeebook.core.reports import (
    ALL_ENTRIES,
    CATEGORY_WISE,
    DAY_WISE,
    aggregate,
    describe_filters,
    generate_report,
    ledger_view,
    report_title,
)
from rupeebook.errors import PermissionDenied, UnknownReportType


def test_report_titles():
    assert report_title(ALL_ENTRIES) == "All Entries Report"
    assert report_title(DAY_WISE) == "Day Wise Report"
    assert report_title(CATEGORY_WISE) == "Category Wise Report"


def test_unknown_report_type_is_rejected(book_entries, members):
    with pytest.raises(UnknownReportType) as excinfo:
        generate_report(book_entries, members, FilterSpec(), "weekly")
    assert "weekly" in str(excinfo.value)


def test_all_entries_newest_first_with_running_balances(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(), ALL_ENTRIES, book_name="Shop Cash")

    assert report.report_title == "All Entries Report"
    assert report.generated_for == "Shop Cash"
    assert [row["id"] for row in report.data] == ["t5", "t4", "t3", "t2", "t1"]
    assert [row["balance"] for row in report.data] == pytest.approx([1049.5, 1129.5, 629.5, 750.0, 1000.0])
    assert report.data[0]["date"] == datetime(2024, 1, 3, 16, 0)
    assert report.summary.total_cash_in == 1500.0
    assert report.summary.total_cash_out == pytest.approx(450.5)
    assert report.summary.net_balance == pytest.approx(1049.5)
    assert report.filters_applied == []


def test_entry_by_names_fall_back_to_owner(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(), ALL_ENTRIES)
    names = {row["id"]: row["member_name"] for row in report.data}
    assert names == {"t1": "Asha", "t2": "Ravi", "t3": "Ravi", "t4": "Owner", "t5": "Asha"}


def test_filtered_report_balances_only_the_selected_entries(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(type="out"), ALL_ENTRIES)
    assert [row["id"] for row in report.data] == ["t5", "t3", "t2"]
    assert [row["balance"] for row in report.data] == pytest.approx([-450.5, -370.5, -250.0])
    assert report.summary.total_cash_in == 0


def test_opening_balance_shifts_the_running_balance(two_entries):
    report = generate_report(two_entries, [], FilterSpec(), ALL_ENTRIES, opening_balance=50)
    assert [row["balance"] for row in report.data] == [110.0, 150.0]


def test_day_wise_report(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(), DAY_WISE)
    assert report.data == [
        {"date": "2024-01-01", "cash_in": 1000.0, "cash_out": 250.0, "balance": 750.0},
        {"date": "2024-01-02", "cash_in": 0.0, "cash_out": 120.5, "balance": 629.5},
        {"date": "2024-01-03", "cash_in": 500.0, "cash_out": 80.0, "balance": 1049.5},
    ]


def test_category_wise_keeps_first_appearance_order(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(), CATEGORY_WISE)
    assert report.data == [
        {"category": "Sales", "cash_in": 1500.0, "cash_out": 0.0, "balance": 1500.0},
        {"category": "Food", "cash_in": 0.0, "cash_out": 330.0, "balance": -330.0},
        {"category": "Travel", "cash_in": 0.0, "cash_out": 120.5, "balance": -120.5},
    ]


def test_two_entry_book_in_every_shape(two_entries):
    rows = aggregate(two_entries, ALL_ENTRIES).data
    assert [(r["id"], r["balance"]) for r in rows] == [("b", 60.0), ("a", 100.0)]

    summary = aggregate(two_entries, CATEGORY_WISE).summary
    assert (summary.total_cash_in, summary.total_cash_out, summary.net_balance) == (100.0, 40.0, 60.0)

    assert aggregate(two_entries, CATEGORY_WISE).data == [
        {"category": "General", "cash_in": 100.0, "cash_out": 40.0, "balance": 60.0}
    ]


def test_empty_book_gives_empty_report():
    result = aggregate([], DAY_WISE)
    assert result.data == []
    assert result.summary.net_balance == 0


def test_missing_category_uses_the_configured_label(members):
    entries = [Transaction("x", "2024-02-01", "out", 10.0, category="")]
    report = generate_report(entries, members, FilterSpec(), CATEGORY_WISE,
                             config={"uncategorized_label": "Misc"})
    assert report.data[0]["category"] == "Misc"


def test_unreadable_dates_are_left_out_and_reported(two_entries, caplog):
    entries = two_entries + [Transaction("bad", "someday", "in", 7.0)]
    with caplog.at_level("WARNING", logger="rupeebook"):
        report = generate_report(entries, [], FilterSpec(), DAY_WISE)
    assert report.skipped == ["bad"]
    assert report.summary.total_cash_in == 100.0
    assert "unreadable dates" in caplog.text


def test_timezone_decides_the_calendar_day():
    entry = Transaction("late", "2024-01-01T20:00:00+00:00", "in", 10.0)
    ist = timezone(timedelta(hours=5, minutes=30))
    assert aggregate([entry], DAY_WISE).data[0]["date"] == "2024-01-01"
    assert aggregate([entry], DAY_WISE, tz=ist).data[0]["date"] == "2024-01-02"


def test_describe_filters_in_display_order(members):
    spec = FilterSpec(type="out", category=["Food"], members=["m1", "gone"],
                      date_from="2024-01-01", date_to="2024-01-31", search_term="tea")
    assert describe_filters(spec, MemberResolver(members)) == [
        ("Date Range", "01 Jan 2024 to 31 Jan 2024"),
        ("Entry Type", "Cash Out"),
        ("Categories", "Food"),
        ("Search Term", "tea"),
        ("Members", "Asha, gone"),
    ]


def test_describe_single_ended_date_filters(members):
    resolver = MemberResolver(members)
    assert describe_filters(FilterSpec(date_from="2024-03-05"), resolver) == [("Date", "05 Mar 2024")]
    assert describe_filters(FilterSpec(date_to="2024-03-05"), resolver) == [("End Date", "05 Mar 2024")]


def test_member_aliases_and_default_name_come_from_config(book_entries, members):
    config = {"members": {"default_name": "Legacy", "aliases": {"Asha": "Asha K."}}}
    report = generate_report(book_entries, members, FilterSpec(), ALL_ENTRIES, config=config)
    names = {row["id"]: row["member_name"] for row in report.data}
    assert names["t1"] == "Asha K."
    assert names["t4"] == "Legacy"


def test_reports_hidden_from_restricted_data_operator(book_entries, members):
    settings = DataOperatorSettings(hide_net_balance_and_reports=True)
    with pytest.raises(PermissionDenied):
        generate_report(book_entries, members, FilterSpec(), ALL_ENTRIES, viewer=members[1], settings=settings)


def test_data_operator_report_covers_only_their_entries(book_entries, members):
    settings = DataOperatorSettings(hide_entries_by_other_members=True)
    report = generate_report(book_entries, members, FilterSpec(), ALL_ENTRIES,
                             viewer=members[1], settings=settings)
    assert [row["id"] for row in report.data] == ["t3", "t2"]


@pytest.fixture
def ledger(book_entries, members):
    return Ledger("shop", "Shop Cash", transactions=book_entries, balance_before=100.0, members=members)


def test_ledger_view_keeps_true_book_balances_after_filtering(ledger):
    view = ledger_view(ledger, FilterSpec(type="in"))
    assert [row["id"] for row in view.rows] == ["t4", "t1"]
    assert [row["balance"] for row in view.rows] == pytest.approx([1229.5, 1100.0])
    assert view.summary.total_cash_in == 1500.0
    assert view.summary.total_cash_out == 0
    assert view.show_balances


def test_ledger_view_hides_balances_from_restricted_data_operator(ledger, members):
    ledger.data_operator_settings = DataOperatorSettings(
        hide_net_balance_and_reports=True, hide_entries_by_other_members=True
    )
    view = ledger_view(ledger, viewer=members[1])
    assert [row["id"] for row in view.rows] == ["t3", "t2"]
    assert all("balance" not in row for row in view.rows)
    assert view.summary is None
    assert not view.show_balances


def test_ledger_view_owner_sees_everything(ledger, members):
    ledger.data_operator_settings = DataOperatorSettings(hide_entries_by_other_members=True)
    view = ledger_view(ledger, viewer=members[0])
    assert len(view.rows) == 5
    assert view.rows[0]["balance"] == pytest.approx(1149.5)


def test_member_resolver_defaults():
    resolver = MemberResolver([Member("m1", "Asha")])
    assert resolver.name_for("m1") == "Asha"
    assert resolver.name_for(None) == "Owner"
    assert resolver.name_for("") == "Owner"
    assert resolver.name_for("ghost") == "Owner"


@pytest.mark.parametrize("report_type", [ALL_ENTRIES, DAY_WISE, CATEGORY_WISE])
def test_reports_are_repeatable(book_entries, members, report_type):
    spec = FilterSpec(type="out")
    first = generate_report(book_entries, members, spec, report_type, book_name="Shop")
    again = generate_report(book_entries, members, spec, report_type, book_name="Shop")
    copied = generate_report(copy.deepcopy(book_entries), copy.deepcopy(members), copy.deepcopy(spec),
                             report_type, book_name="Shop")
    assert first == again == copied


def test_filter_matching_nothing_gives_empty_report(members):
    entries = [
        Transaction("s1", "2024-01-01", "in", 300.0, category="Sales"),
        Transaction("r1", "2024-01-02", "out", 90.0, category="Rent"),
    ]
    for report_type in (ALL_ENTRIES, DAY_WISE, CATEGORY_WISE):
        report = generate_report(entries, members, FilterSpec(category=["Food"]), report_type)
        assert report.data == []
        assert report.summary.total_cash_in == 0
        assert report.summary.total_cash_out == 0
        assert report.summary.net_balance == 0
        assert report.filters_applied == [("Categories", "Food")]


def test_unknown_member_in_filter_is_shown_by_id(book_entries, members):
    report = generate_report(book_entries, members, FilterSpec(members=["ghost"]), ALL_ENTRIES)
    assert report.data == []
    assert report.filters_applied == [("Members", "ghost")]


def test_member_resolver_filter_labels():
    resolver = MemberResolver([Member("m1", "Asha")], aliases={"Asha": "Asha K."})
    assert resolver.label_for("m1") == "Asha K."
    assert resolver.label_for("ghost") == "ghost"
