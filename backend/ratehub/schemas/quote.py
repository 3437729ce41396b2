# 报价接口的请求/响应模型

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ratehub.schemas.carrier import TariffAccount
from ratehub.schemas.shipment import ShipmentRequest
from ratehub.services.pricing.types import FinalQuote, PricingRunResult, SkippedSource


class TariffAccountIn(BaseModel):
    name: str = Field(..., min_length=1)
    credentials: Dict[str, str] = Field(default_factory=dict)
    margin_pct: Optional[Decimal] = Field(None, ge=0)       # 为空 → DEFAULT_MARGIN_PCT
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_account(self, carrier_id: str) -> TariffAccount:
        return TariffAccount(
            carrier_id=carrier_id,
            name=self.name.strip(),
            credentials=dict(self.credentials),
            margin_pct=self.margin_pct,
            metadata=dict(self.metadata),
        )


class CarrierTariffsIn(BaseModel):
    carrier_id: str
    tariffs: List[TariffAccountIn] = Field(default_factory=list)
    allowed: List[str] = Field(default_factory=list)         # 客户可用的 tariff 名（已由上游解析）


class QuoteRequestBody(BaseModel):
    shipment: ShipmentRequest
    carriers: List[CarrierTariffsIn] = Field(default_factory=list)

    def carrier_tariffs(self) -> Dict[str, Dict[str, TariffAccount]]:
        out: Dict[str, Dict[str, TariffAccount]] = {}
        for c in self.carriers:
            accounts = out.setdefault(c.carrier_id, {})
            for t in c.tariffs:
                acc = t.to_account(c.carrier_id)
                accounts[acc.name] = acc
        return out

    def permissions(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for c in self.carriers:
            out.setdefault(c.carrier_id, []).extend(c.allowed)
        return out


class FinalQuoteOut(BaseModel):
    carrier_id: str
    tariff_id: str
    cost: Decimal
    price: Decimal
    margin_pct: Decimal
    standard_price: Optional[Decimal] = None
    historical_avg: Optional[Decimal] = None
    rationale: str
    quoted_at: datetime

    @classmethod
    def from_quote(cls, q: FinalQuote) -> "FinalQuoteOut":
        return cls(**{k: getattr(q, k) for k in cls.model_fields})


class SkippedSourceOut(BaseModel):
    carrier_id: str
    tariff_id: Optional[str] = None
    reason: str
    message: Optional[str] = None

    @classmethod
    def from_skipped(cls, s: SkippedSource) -> "SkippedSourceOut":
        return cls(carrier_id=s.carrier_id, tariff_id=s.tariff_id, reason=s.reason, message=s.message)


class QuoteRunOut(BaseModel):
    quotes: List[FinalQuoteOut]
    skipped: List[SkippedSourceOut]
    history_errors: List[str] = Field(default_factory=list)
    ok: bool

    @classmethod
    def from_result(cls, r: PricingRunResult) -> "QuoteRunOut":
        return cls(
            quotes=[FinalQuoteOut.from_quote(q) for _, q in sorted(r.quotes.items())],
            skipped=[SkippedSourceOut.from_skipped(s) for s in r.skipped],
            history_errors=list(r.history_errors),
            ok=r.ok,
        )


class QuoteHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booked_at: datetime
    carrier_id: str
    tariff_name: str
    origin_zip: str
    dest_zip: str
    weight: Optional[Decimal] = None
    freight_class: str
    lowest_cost: Optional[Decimal] = None
    price: Optional[Decimal] = None
