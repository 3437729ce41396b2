from decimal import Decimal

import pytest

from ratehub.integrations.carriers import InvalidResponse, parse_charge


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$1,234.50", "1234.50"),
        ("1234.5", "1234.50"),
        (1234.5, "1234.50"),
        (" 98.105 USD", "98.11"),
        (Decimal("0.01"), "0.01"),
    ],
)
def test_parse_charge_accepts_formatted_amounts(raw, expected):
    assert parse_charge(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", [None, "", "N/A", "0", "-12.00", "$0.00", True, "NaN"])
def test_parse_charge_rejects_missing_or_non_positive(raw):
    with pytest.raises(InvalidResponse):
        parse_charge(raw)
