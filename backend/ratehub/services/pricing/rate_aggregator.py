"""
询价聚合：
   - collect_quotes：把 (adapter, tariff) 全部丢进线程池并发询价，等全部结束（或到 run 级超时）再返回；
   - select_best：只在 cost > 0 的有效结果里取最小值，同价按 tariff 名字升序（没有业务含义，只求确定）；
   - best_cost：单个承运商的便捷入口。
"""

from __future__ import annotations
import logging, time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout, as_completed
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ratehub.integrations.carriers.base import CarrierAdapter
from ratehub.schemas.carrier import CarrierQuoteResult, QuoteFailureKind, TariffAccount
from ratehub.schemas.shipment import ShipmentRequest
from ratehub.services.pricing.context import PricingContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteJob:
    adapter: CarrierAdapter
    tariff: TariffAccount
    request: ShipmentRequest

    @property
    def carrier_id(self) -> str:
        return self.adapter.carrier_id


def _run_job(job: QuoteJob) -> CarrierQuoteResult:
    try:
        return job.adapter.quote(job.tariff, job.request)
    except Exception as e:  # noqa: BLE001
        # adapter.quote 本身不抛 CarrierError；这里兜底非预期异常，只影响这一个 tariff
        logger.exception("unexpected error quoting %s tariff=%s", job.carrier_id, job.tariff.name)
        return CarrierQuoteResult.failed(
            job.carrier_id, job.tariff.name, QuoteFailureKind.INVALID_RESPONSE, message=f"unexpected error: {e}",
        )


def collect_quotes(jobs: Sequence[QuoteJob], ctx: PricingContext) -> List[CarrierQuoteResult]:
    """并发执行全部询价任务；到 run_timeout 还没结束的任务记为 TIMEOUT，不再等待。"""
    if not jobs:
        return []

    started = time.monotonic()
    results: List[CarrierQuoteResult] = []
    executor = ThreadPoolExecutor(max_workers=min(ctx.max_workers, len(jobs)), thread_name_prefix="quote")
    future_to_job = {executor.submit(_run_job, job): job for job in jobs}
    collected = set()
    try:
        for future in as_completed(future_to_job, timeout=ctx.run_timeout):
            results.append(future.result())
            collected.add(future)
    except FuturesTimeout:
        for future, job in future_to_job.items():
            if future in collected:
                continue
            if future.done():
                results.append(future.result())
                continue
            future.cancel()
            logger.warning(
                "%s tariff=%s did not finish within %.0fs; treated as timeout",
                job.carrier_id, job.tariff.name, ctx.run_timeout,
            )
            results.append(CarrierQuoteResult.failed(
                job.carrier_id, job.tariff.name, QuoteFailureKind.TIMEOUT,
                message=f"no answer within run timeout {ctx.run_timeout}s",
            ))
    finally:
        # 不等待慢任务；requests 自身的超时会让线程最终退出
        executor.shutdown(wait=False, cancel_futures=True)

    logger.info(
        "collected %d quote results (%d ok) in %.2fs",
        len(results), sum(1 for r in results if r.ok), time.monotonic() - started,
    )
    return results


def select_best(results: Iterable[CarrierQuoteResult]) -> Optional[Tuple[str, Decimal]]:
    valid = [r for r in results if r.ok]
    if not valid:
        return None
    best = min(valid, key=lambda r: (r.cost, r.tariff_id))
    return best.tariff_id, best.cost


def best_cost(
    adapter: CarrierAdapter,
    permitted: Mapping[str, TariffAccount],
    request: ShipmentRequest,
    ctx: PricingContext,
) -> Optional[Tuple[str, Decimal]]:
    """单个承运商：每个 permitted tariff 询价一次，返回 (tariff_id, cost)；全部无效 → None。"""
    jobs = [QuoteJob(adapter, tariff, request) for _, tariff in sorted(permitted.items())]
    best = select_best(collect_quotes(jobs, ctx))
    if best is None:
        logger.info("%s: no rate available", adapter.carrier_id)
    return best
