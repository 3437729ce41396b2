# 售价计算：margin 公式 + 历史均价，取两者较高者，避免低于任何一个底线报价

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ratehub.services.pricing.errors import CalculationError


_Q_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")

RATIONALE_STANDARD = "standard"
RATIONALE_HISTORICAL = "historical"
RATIONALE_STANDARD_ONLY = "standard_only"
RATIONALE_HISTORICAL_ONLY = "historical_only"


@dataclass(frozen=True)
class PriceDecision:
    price: Decimal
    rationale: str
    standard_price: Optional[Decimal]
    historical_avg: Optional[Decimal]


def _d(val) -> Optional[Decimal]:
    if val is None:
        return None
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _round(val: Decimal) -> Decimal:
    return val.quantize(_Q_CENTS, rounding=ROUND_HALF_UP)


def compute_standard_price(cost, margin_pct) -> Optional[Decimal]:
    """
    standardPrice = cost / (1 - margin/100)
    margin 不在 [0, 100) 内 → None（该项跳过，不是异常）
    """
    cost_d, margin = _d(cost), _d(margin_pct)
    if cost_d is None or margin is None or cost_d <= 0:
        return None
    if margin < 0 or margin >= _HUNDRED:
        return None
    return cost_d / (Decimal(1) - margin / _HUNDRED)


"""
Price(cost, margin, historicalAvg?) -> (price, rationale)
   1) 两者都有：取 max，rationale 记录胜出方（相等算 standard）；
   2) 只有一个：用那一个；
   3) 都没有：CalculationError（该承运商无报价）；
   4) 最后统一四舍五入到分。
"""
def compute_sell_price(cost, margin_pct, historical_avg=None) -> PriceDecision:
    standard = compute_standard_price(cost, margin_pct)
    hist = _d(historical_avg)
    if hist is not None and hist <= 0:
        hist = None

    if standard is not None and hist is not None:
        if hist > standard:
            price, rationale = hist, RATIONALE_HISTORICAL
        else:
            price, rationale = standard, RATIONALE_STANDARD
    elif standard is not None:
        price, rationale = standard, RATIONALE_STANDARD_ONLY
    elif hist is not None:
        price, rationale = hist, RATIONALE_HISTORICAL_ONLY
    else:
        raise CalculationError(
            f"no pricing source: cost={cost} margin={margin_pct} historical_avg={historical_avg}"
        )

    return PriceDecision(
        price=_round(price),
        rationale=rationale,
        standard_price=_round(standard) if standard is not None else None,
        historical_avg=_round(hist) if hist is not None else None,
    )
