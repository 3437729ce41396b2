from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

from ratehub.core.config import Settings, settings as default_settings


@dataclass(frozen=True)
class PricingContext:
    """
    一次报价 run 用到的全部配置快照：endpoint、超时、并发、margin、历史匹配参数。
    启动时构建一次，作为参数一路传下去，不再读全局配置。
    """
    endpoints: Mapping[str, str] = field(default_factory=dict)
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    run_timeout: float = 45.0
    max_workers: int = 8
    http_retries: int = 0
    retry_backoff_sec: float = 1.0
    default_margin_pct: Decimal = Decimal("20")
    weight_tolerance_pct: Decimal = Decimal("10")
    history_window_months: int = 12

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "PricingContext":
        cfg = cfg or default_settings
        endpoints = {k: v for k, v in cfg.carrier_endpoints.items() if v}
        return cls(
            endpoints=MappingProxyType(endpoints),
            connect_timeout=float(cfg.CARRIER_CONNECT_TIMEOUT),
            read_timeout=float(cfg.CARRIER_READ_TIMEOUT),
            run_timeout=float(cfg.CARRIER_RUN_TIMEOUT),
            max_workers=cfg.CARRIER_MAX_WORKERS,
            http_retries=cfg.CARRIER_HTTP_RETRIES,
            retry_backoff_sec=cfg.CARRIER_RETRY_BACKOFF_SEC,
            default_margin_pct=Decimal(str(cfg.DEFAULT_MARGIN_PCT)),
            weight_tolerance_pct=Decimal(str(cfg.HISTORY_WEIGHT_TOLERANCE_PCT)),
            history_window_months=cfg.HISTORY_WINDOW_MONTHS,
        )
