# 承运商侧的数据结构：tariff 账号 + 单次报价结果
# 纯数据，不依赖 integrations / services，两边都从这里 import

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional


class QuoteFailureKind(str, Enum):
    VALIDATION = "validation"
    CREDENTIAL = "credential"
    NETWORK = "network"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class TariffAccount:
    """一个承运商账号/tariff：鉴权信息 + margin。由外部加载，一次 run 内不可变。"""
    carrier_id: str
    name: str
    credentials: Mapping[str, str] = field(default_factory=dict)
    margin_pct: Optional[Decimal] = None      # None → 用 PricingContext.default_margin_pct
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def credential(self, key: str) -> Optional[str]:
        val = self.credentials.get(key)
        if val is None:
            return None
        val = str(val).strip()
        return val or None


@dataclass(frozen=True)
class CarrierQuoteResult:
    carrier_id: str
    tariff_id: str
    cost: Optional[Decimal] = None
    failure: Optional[QuoteFailureKind] = None
    message: Optional[str] = None
    elapsed_ms: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.cost is not None and self.cost > 0

    @classmethod
    def success(cls, carrier_id: str, tariff_id: str, cost: Decimal, elapsed_ms: Optional[int] = None) -> "CarrierQuoteResult":
        return cls(carrier_id=carrier_id, tariff_id=tariff_id, cost=cost, elapsed_ms=elapsed_ms)

    @classmethod
    def failed(
        cls,
        carrier_id: str,
        tariff_id: str,
        err: Any,
        message: Optional[str] = None,
        elapsed_ms: Optional[int] = None,
    ) -> "CarrierQuoteResult":
        """err 可以是 CarrierError（取其 kind 和 message）或直接一个 QuoteFailureKind。"""
        if isinstance(err, QuoteFailureKind):
            return cls(carrier_id, tariff_id, failure=err, message=message, elapsed_ms=elapsed_ms)
        return cls(carrier_id, tariff_id, failure=err.kind, message=message or str(err), elapsed_ms=elapsed_ms)
