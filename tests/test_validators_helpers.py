# sales_orders/tests/test_validators_helpers.py

from datetime import date, datetime

import pytest

from sales_orders.api.repositories import SalesOrderLine
from sales_orders.constants import MSG_REQUIRED_FIELDS
from sales_orders.utils.helpers import (
    as_float,
    as_int,
    fmt_money,
    fmt_qty,
    parse_date,
    to_api_date,
    to_iso_date,
)
from sales_orders.utils.validators import (
    calculate_amount,
    calculate_total,
    has_duplicate,
    is_set,
    validate_header,
)


# ---------------------------
# helpers
# ---------------------------

@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-15", date(2024, 1, 15)),
        ("2024-01-15T00:00:00", date(2024, 1, 15)),
        ("15/Jan/2024", date(2024, 1, 15)),
        ("15/01/2024", date(2024, 1, 15)),
        (datetime(2024, 1, 15, 9, 30), date(2024, 1, 15)),
        ("", None),
        (None, None),
        ("not a date", None),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


def test_api_date_format():
    assert to_api_date("2024-03-05") == "05/Mar/2024"
    assert to_api_date(date(2023, 12, 31)) == "31/Dec/2023"
    with pytest.raises(ValueError):
        to_api_date("")
    assert to_iso_date("05/Mar/2024") == "2024-03-05"
    assert to_iso_date(None) == ""


def test_number_helpers():
    assert as_int("12") == 12
    assert as_int("12.0") == 12
    assert as_int("") is None
    assert as_int("x") is None
    assert as_float("2.5") == 2.5
    assert as_float(None) == 0.0
    assert as_float("x", 1.0) == 1.0
    assert fmt_money(1234.5) == "1,234.50"
    assert fmt_money("n/a", sentinel="-") == "-"
    assert fmt_qty(3.0) == "3"
    assert fmt_qty(2.5) == "2.5"


# ---------------------------
# validators
# ---------------------------

@pytest.mark.parametrize("value, ok", [(None, False), (0, False), ("", False), ("0", False), (1, True), ("7", True)])
def test_is_set(value, ok):
    assert is_set(value) is ok


def test_amount_and_total():
    assert calculate_amount(3, "2.5") == pytest.approx(7.5)
    assert calculate_amount(None, 4) == 0
    lines = [
        SalesOrderLine(1, 1, 1, 11, 111, 5, 10, 2.5, 25.0),
        SalesOrderLine(2, 1, 1, 11, 112, 6, 4, 5, 20.0),
    ]
    assert calculate_total(lines) == pytest.approx(45.0)
    assert calculate_total([]) == 0


def test_header_validation_requires_every_field():
    full = {"so_date": "2024-01-15", "division_id": 1, "so_type_id": 10, "customer_id": 100}
    assert validate_header(full) is None
    for key in full:
        broken = dict(full, **{key: None})
        assert validate_header(broken) == MSG_REQUIRED_FIELDS


def test_duplicate_detection_on_dicts_and_records():
    rows = [
        {"id_number": 1, "main_group_id": 1, "sub_main_group_id": 11, "item_id": 111},
        SalesOrderLine(2, 1, 1, 11, 112, 6, 1, 1, 1),
    ]
    keys = ("main_group_id", "sub_main_group_id", "item_id")
    assert has_duplicate(rows, {"main_group_id": 1, "sub_main_group_id": 11, "item_id": 112}, keys)
    assert not has_duplicate(rows, {"main_group_id": 1, "sub_main_group_id": 11, "item_id": 113}, keys)
    assert not has_duplicate(
        rows, {"main_group_id": 1, "sub_main_group_id": 11, "item_id": 112}, keys, exclude_id=2
    )
