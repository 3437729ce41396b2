"""
历史均价索引：
   - average_price：同 lane（起止邮编前 3 位）+ 同 freight class + 重量 ±W% + 最近 N 个月内的历史报价，取均价；
   - record：每条成功的 FinalQuote 追加一行，单独事务提交，进程内加锁串行写。
查询失败（库不可用）只打日志返回 None；写入失败抛 HistoryWriteError 交给上层记录。
"""

from __future__ import annotations
import logging, threading
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ratehub.db.session import session_scope
from ratehub.repository.quote_history_repo import append_quote_history, fetch_lane_candidates
from ratehub.schemas.shipment import ShipmentRequest
from ratehub.services.pricing.context import PricingContext
from ratehub.services.pricing.errors import HistoryWriteError
from ratehub.services.pricing.types import FinalQuote
from ratehub.utils.clock import months_before, now_utc

logger = logging.getLogger(__name__)

_Q_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")


def _parse_positive(raw) -> Optional[Decimal]:
    if raw is None:
        return None
    try:
        val = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not val.is_finite() or val <= 0:
        return None
    return val


def weight_band(weight: Decimal, tolerance_pct: Decimal) -> tuple[Decimal, Decimal]:
    """500 / 10% → (450, 550)，两端都包含。"""
    delta = weight * tolerance_pct / _HUNDRED
    return weight - delta, weight + delta


class HistoricalPriceIndex:

    def __init__(
        self,
        session_factory: Callable[[], Session],
        ctx: PricingContext,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._session_factory = session_factory
        self.tolerance_pct = ctx.weight_tolerance_pct
        self.window_months = ctx.history_window_months
        self._clock = clock
        self._write_lock = threading.Lock()


    # ---------- 读 ----------
    def average_price(self, origin_zip: str, dest_zip: str, weight, freight_class: str) -> Optional[Decimal]:
        query_weight = _parse_positive(weight)
        if query_weight is None or not origin_zip or not dest_zip or not freight_class:
            return None

        since = months_before(self._clock(), self.window_months)
        try:
            with self._session_factory() as db:
                rows = fetch_lane_candidates(
                    db,
                    origin_zip3=origin_zip.strip()[:3],
                    dest_zip3=dest_zip.strip()[:3],
                    freight_class=freight_class,
                    since=since,
                )
        except SQLAlchemyError as e:
            logger.warning("history store unavailable, skipping historical average: %s", e)
            return None

        low, high = weight_band(query_weight, self.tolerance_pct)
        prices: List[Decimal] = []
        skipped = 0
        for raw_weight, raw_price in rows:
            w, p = _parse_positive(raw_weight), _parse_positive(raw_price)
            if w is None or p is None:
                skipped += 1
                continue
            if low <= w <= high:
                prices.append(p)

        if skipped:
            logger.debug("skipped %d malformed history rows", skipped)
        if not prices:
            return None
        avg = sum(prices) / Decimal(len(prices))
        return avg.quantize(_Q_CENTS, rounding=ROUND_HALF_UP)


    # ---------- 写 ----------
    def record(self, quote: FinalQuote, request: ShipmentRequest) -> None:
        row = {
            "booked_at": quote.quoted_at,
            "carrier_id": quote.carrier_id,
            "tariff_name": quote.tariff_id,
            "origin_zip": request.origin.postal_code,
            "origin_zip3": request.origin.zip3,
            "dest_zip": request.destination.postal_code,
            "dest_zip3": request.destination.zip3,
            "weight": request.total_weight,
            "freight_class": request.rating_class,
            "lowest_cost": quote.cost,
            "price": quote.price,
        }
        # 同一进程内的并发 run 串行写；每条一个事务，commit 后才返回
        # 建 session 本身也可能失败（库不可用），同样归为 HistoryWriteError
        with self._write_lock:
            try:
                with session_scope(self._session_factory) as db:
                    append_quote_history(db, row)
            except SQLAlchemyError as e:
                raise HistoryWriteError(f"failed to append history for {quote.carrier_id}/{quote.tariff_id}: {e}") from e
