from __future__ import annotations
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from ratehub.db.session import SessionLocal
from ratehub.integrations.carriers import CarrierAdapter, build_adapters
from ratehub.schemas.carrier import CarrierQuoteResult, TariffAccount
from ratehub.schemas.shipment import ShipmentRequest
from ratehub.services.pricing.context import PricingContext
from ratehub.services.pricing.errors import CalculationError, HistoryWriteError, InvalidShipmentError
from ratehub.services.pricing.history_index import HistoricalPriceIndex
from ratehub.services.pricing.permissions import resolve_permitted_tariffs
from ratehub.services.pricing.pricing_formula import compute_sell_price
from ratehub.services.pricing.rate_aggregator import QuoteJob, collect_quotes, select_best
from ratehub.services.pricing.types import FinalQuote, PricingRunResult, SkippedSource
from ratehub.utils.clock import now_utc

logger = logging.getLogger(__name__)


def check_shipment(request: ShipmentRequest) -> None:
    """唯一会让整个 run 失败的输入错误：没有货物行 / 总重量非正 / 没有 freight class。"""
    if not request.commodities:
        raise InvalidShipmentError("shipment has no commodity lines")
    if request.total_weight <= 0:
        raise InvalidShipmentError("shipment total weight must be positive")
    if not request.rating_class:
        raise InvalidShipmentError("shipment has no freight class")


class QuotePricingEngine:
    """
    一次 run：Permission → Aggregate（全部承运商一起并发）→ Price → Log
    每个承运商互相独立；任何单个 tariff / 承运商的失败只进 skipped，不中断 run。
    """

    def __init__(
        self,
        ctx: PricingContext,
        adapters: Mapping[str, CarrierAdapter],
        history: HistoricalPriceIndex,
        clock: Callable = now_utc,
    ) -> None:
        self.ctx = ctx
        self.adapters = dict(adapters)
        self.history = history
        self._clock = clock

    def price_shipment(
        self,
        request: ShipmentRequest,
        carrier_tariffs: Mapping[str, Mapping[str, TariffAccount]],
        permissions: Mapping[str, Iterable[str]],
    ) -> PricingRunResult:
        check_shipment(request)
        result = PricingRunResult()

        # 1) 权限过滤 + 组装询价任务
        jobs: List[QuoteJob] = []
        permitted_by_carrier: Dict[str, Dict[str, TariffAccount]] = {}
        for carrier_id in sorted(permissions):
            adapter = self.adapters.get(carrier_id)
            if adapter is None:
                logger.warning("no adapter configured for carrier=%s; skipped", carrier_id)
                result.skipped.append(SkippedSource(carrier_id, None, "not_configured"))
                continue
            permitted = resolve_permitted_tariffs(
                carrier_tariffs.get(carrier_id, {}), permissions[carrier_id], carrier_id=carrier_id,
            )
            if not permitted:
                result.skipped.append(SkippedSource(carrier_id, None, "no_permitted_tariffs"))
                continue
            permitted_by_carrier[carrier_id] = permitted
            jobs.extend(QuoteJob(adapter, tariff, request) for tariff in permitted.values())

        if not jobs:
            logger.info("no carrier available for this shipment")
            return result

        # 2) 历史均价：每个 run 查一次，在本次任何写入之前
        historical_avg = self.history.average_price(
            request.origin.postal_code,
            request.destination.postal_code,
            request.total_weight,
            request.rating_class,
        )

        # 3) 并发询价，按承运商分组
        grouped: Dict[str, List[CarrierQuoteResult]] = defaultdict(list)
        for r in collect_quotes(jobs, self.ctx):
            grouped[r.carrier_id].append(r)
            if not r.ok:
                result.skipped.append(SkippedSource(
                    r.carrier_id, r.tariff_id,
                    r.failure.value if r.failure else "invalid_response",
                    r.message,
                ))

        # 4) 每个承运商取最低价 → 定价 → 写历史
        for carrier_id, permitted in permitted_by_carrier.items():
            best = select_best(grouped.get(carrier_id, []))
            if best is None:
                logger.info("%s: no rate available", carrier_id)
                result.skipped.append(SkippedSource(carrier_id, None, "no_rate_available"))
                continue
            tariff_id, cost = best
            quote = self._price(carrier_id, permitted[tariff_id], cost, historical_avg, result)
            if quote is None:
                continue
            result.quotes[carrier_id] = quote
            try:
                self.history.record(quote, request)
            except HistoryWriteError as e:
                logger.error("%s", e)
                result.history_errors.append(str(e))

        logger.info(
            "pricing run done: %d quotes, %d skipped sources, ok=%s",
            len(result.quotes), len(result.skipped), result.ok,
        )
        return result

    def _price(self, carrier_id, tariff: TariffAccount, cost, historical_avg, result: PricingRunResult) -> Optional[FinalQuote]:
        margin = tariff.margin_pct if tariff.margin_pct is not None else self.ctx.default_margin_pct
        margin = Decimal(str(margin))
        try:
            decision = compute_sell_price(cost, margin, historical_avg)
        except CalculationError as e:
            logger.warning("%s tariff=%s pricing failed: %s", carrier_id, tariff.name, e)
            result.skipped.append(SkippedSource(carrier_id, tariff.name, "calculation", str(e)))
            return None

        return FinalQuote(
            carrier_id=carrier_id,
            tariff_id=tariff.name,
            cost=cost,
            price=decision.price,
            margin_pct=margin,
            standard_price=decision.standard_price,
            historical_avg=decision.historical_avg,
            rationale=decision.rationale,
            quoted_at=self._clock(),
        )


def create_pricing_engine(
    ctx: Optional[PricingContext] = None,
    session_factory=None,
    http=None,
) -> QuotePricingEngine:
    """按配置装配：adapter（有 endpoint 的承运商）+ 历史索引（默认 SessionLocal）。"""
    ctx = ctx or PricingContext.from_settings()
    adapters = build_adapters(ctx, http=http)
    history = HistoricalPriceIndex(session_factory or SessionLocal, ctx)
    return QuotePricingEngine(ctx, adapters, history)
