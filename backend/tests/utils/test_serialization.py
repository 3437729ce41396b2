from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ratehub.schemas.carrier import QuoteFailureKind
from ratehub.utils.backoff import calc_next_delay
from ratehub.utils.serialization import to_jsonable


@dataclass(frozen=True)
class _Row:
    price: Decimal
    kind: QuoteFailureKind
    at: datetime


def test_to_jsonable_keeps_money_exact():
    out = to_jsonable({"rows": [_Row(Decimal("250.10"), QuoteFailureKind.TIMEOUT, datetime(2026, 1, 2, 3, 4))]})
    assert out == {"rows": [{"price": "250.10", "kind": "timeout", "at": "2026-01-02T03:04:00"}]}


def test_to_jsonable_drops_non_finite():
    assert to_jsonable([Decimal("NaN"), float("inf"), 1.5]) == [None, None, 1.5]


def test_backoff_grows_and_caps():
    assert 1.0 <= calc_next_delay(1) <= 1.25
    assert 4.0 <= calc_next_delay(3) <= 5.0
    assert 60.0 <= calc_next_delay(20) <= 75.0
