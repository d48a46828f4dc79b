import logging

import pytest

from rupeebook.core.models import Member, Transaction


@pytest.fixture(autouse=True)
def reset_package_logger():
    """The CLI points the package logger at its own stream; undo that between tests."""
    yield
    logger = logging.getLogger("rupeebook")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(logging.NullHandler())
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def no_config_from_env(monkeypatch):
    monkeypatch.delenv("RUPEEBOOK_CONFIG", raising=False)
    monkeypatch.delenv("RUPEEBOOK_LOG_LEVEL", raising=False)


@pytest.fixture
def members():
    return [
        Member("m1", "Asha", "owner"),
        Member("m2", "Ravi", "data-operator"),
        Member("m3", "Meena", "viewer"),
    ]


@pytest.fixture
def book_entries():
    return [
        Transaction("t1", "2024-01-01T09:00:00", "in", 1000.0, category="Sales",
                    remark="Opening sale", member_id="m1"),
        Transaction("t2", "2024-01-01T18:30:00", "out", 250.0, category="Food",
                    subcategory="Lunch", remark="Team lunch", member_id="m2"),
        Transaction("t3", "2024-01-02T10:00:00", "out", 120.5, category="Travel",
                    subcategory="Taxi", remark="Cab to bank", member_id="m2"),
        Transaction("t4", "2024-01-03T12:00:00", "in", 500.0, category="Sales",
                    remark="Invoice 42"),
        Transaction("t5", "2024-01-03T16:00:00", "out", 80.0, category="Food",
                    subcategory="Snacks", remark="Tea and snacks", member_id="m1"),
    ]


@pytest.fixture
def two_entries():
    return [
        Transaction("a", "2024-01-01", "in", 100.0, category="General"),
        Transaction("b", "2024-01-02", "out", 40.0, category="General"),
    ]
