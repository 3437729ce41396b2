from datetime import datetime

import pytest

from ratehub.utils.clock import months_before, now_utc


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (datetime(2026, 6, 15, 12), 12, datetime(2025, 6, 15, 12)),
        (datetime(2026, 3, 31), 1, datetime(2026, 2, 28)),
        (datetime(2024, 3, 31), 1, datetime(2024, 2, 29)),
        (datetime(2026, 1, 10), 1, datetime(2025, 12, 10)),
        (datetime(2026, 1, 10), 0, datetime(2026, 1, 10)),
        (datetime(2026, 5, 31), 25, datetime(2024, 4, 30)),
    ],
)
def test_months_before(moment, months, expected):
    assert months_before(moment, months) == expected


def test_now_utc_is_naive():
    assert now_utc().tzinfo is None
