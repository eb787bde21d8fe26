"""Tests for price estimates."""

from decimal import Decimal

import pytest

from prodexa_storage.codec import ListRecord
from prodexa_storage.pricing import estimate_total, format_amount, parse_amount


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("3.50", Decimal("3.50")),
        ("3,50", Decimal("3.50")),
        (" 2 EUR", Decimal("2")),
        (",5", Decimal("0.5")),
        ("about 3", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


class TestEstimateTotal:
    """Tests for estimate_total."""

    records = [
        ListRecord("1", "Milk", quantity="2", price="1,20"),
        ListRecord("2", "Bread", quantity="", price="2.50"),
        ListRecord("3", "Salt", quantity="pack", price="0.99"),
        ListRecord("4", "Eggs", quantity="12"),
        ListRecord("5", "Water", price="0"),
    ]

    def test_sums_price_times_quantity(self):
        estimate = estimate_total(self.records)

        assert estimate.total == Decimal("5.89")
        assert estimate.priced_count == 3
        assert estimate.unpriced_count == 2
        assert estimate.item_count == 5

    def test_only_selected_ids(self):
        estimate = estimate_total(self.records, selected_ids={"1", "4"})

        assert estimate.total == Decimal("2.40")
        assert estimate.priced_count == 1
        assert estimate.unpriced_count == 1

    def test_empty(self):
        estimate = estimate_total([])

        assert estimate.total == 0
        assert estimate.item_count == 0


def test_format_amount():
    assert format_amount(Decimal("12.5")) == "12,50"
    assert format_amount(Decimal("0.005")) == "0,01"
    assert format_amount(Decimal("3")) == "3,00"
