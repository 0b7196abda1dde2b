from datetime import date

import pytest

from doctorplanet.services.receipt_service import format_money
from doctorplanet.services.sequence_service import (
    SequenceError,
    format_receipt_number,
    next_daily_number,
)


@pytest.mark.parametrize(
    "cents,expected",
    [
        (0, "Rs. 0.00"),
        (None, "Rs. 0.00"),
        (5, "Rs. 0.05"),
        (123450, "Rs. 1,234.50"),
        (-50000, "-Rs. 500.00"),
    ],
)
def test_format_money(app, cents, expected):
    assert format_money(cents) == expected


def test_format_money_custom_symbol(app):
    assert format_money(1000, symbol="PKR") == "PKR 10.00"


def test_format_receipt_number():
    assert format_receipt_number("POS", date(2026, 1, 5), 7) == "POS-20260105-0007"
    assert format_receipt_number("POS", date(2026, 1, 5), 12345) == "POS-20260105-12345"


def test_next_daily_number_per_key_and_date(db_session):
    day = date(2026, 10, 18)
    assert next_daily_number(sequence_key="POS", sequence_date=day) == 1
    assert next_daily_number(sequence_key="POS", sequence_date=day) == 2
    assert next_daily_number(sequence_key="WEB", sequence_date=day) == 1
    assert next_daily_number(sequence_key="POS", sequence_date=date(2026, 10, 19)) == 1
    db_session.commit()
    assert next_daily_number(sequence_key="POS", sequence_date=day) == 3


def test_next_daily_number_requires_key(db_session):
    with pytest.raises(SequenceError):
        next_daily_number(sequence_key="", sequence_date=date(2026, 10, 18))
