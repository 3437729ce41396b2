# 报价流程输出侧的数据结构（最终报价 / 被跳过的来源 / 一次 run 的汇总）

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FinalQuote:
    carrier_id: str
    tariff_id: str
    cost: Decimal                     # 最低成本
    price: Decimal                    # 对客售价
    margin_pct: Decimal
    standard_price: Optional[Decimal]
    historical_avg: Optional[Decimal]
    rationale: str
    quoted_at: datetime


@dataclass(frozen=True)
class SkippedSource:
    """被跳过的来源：整个承运商（tariff_id=None）或某一个 tariff。"""
    carrier_id: str
    tariff_id: Optional[str]
    reason: str
    message: Optional[str] = None


@dataclass
class PricingRunResult:
    quotes: Dict[str, FinalQuote] = field(default_factory=dict)
    skipped: List[SkippedSource] = field(default_factory=list)
    history_errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        # 每条报价都已写入历史表才算成功
        return not self.history_errors
