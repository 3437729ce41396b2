"""
承运商 adapter 基类：
   quote() 是唯一对外入口，固定流程 = 校验鉴权 → 校验运单 → 组装报文 → 发请求 → 解析费用；
   任何 CarrierError 都被降级为 CarrierQuoteResult.failed，不会抛给调用方。
子类只负责本承运商的：必填鉴权字段、必填运单字段、报文序列化、响应解析。
"""

from __future__ import annotations
import logging, re, time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, ClassVar, Dict, Optional, Tuple

import requests

from ratehub.integrations.carriers.errors import (
    CarrierError, CarrierRejected, CredentialError, InvalidResponse, NetworkError, ValidationError,
)
from ratehub.integrations.carriers.http_client import CarrierHttpClient
from ratehub.schemas.carrier import CarrierQuoteResult, TariffAccount
from ratehub.schemas.shipment import ShipmentRequest

logger = logging.getLogger(__name__)

_Q_CENTS = Decimal("0.01")
# 金额里允许出现的格式字符：货币符号、千分位、空白、币种
_CURRENCY_NOISE = re.compile(r"[\s$,]|USD|CAD", re.IGNORECASE)


@dataclass(frozen=True)
class PreparedCall:
    """一次承运商调用的全部参数（序列化后的报文）。"""
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)


def parse_charge(raw: Any) -> Decimal:
    """
    "$1,234.50" / "1234.5" / 1234.5 → Decimal("1234.50")
    解析失败或 <= 0 → InvalidResponse
    """
    if raw is None:
        raise InvalidResponse("charge field missing")
    if isinstance(raw, bool):
        raise InvalidResponse(f"unparsable charge: {raw!r}")
    text = _CURRENCY_NOISE.sub("", str(raw))
    if not text:
        raise InvalidResponse(f"unparsable charge: {raw!r}")
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise InvalidResponse(f"unparsable charge: {raw!r}") from e
    if not value.is_finite() or value <= 0:
        raise InvalidResponse(f"non-positive charge: {raw!r}")
    return value.quantize(_Q_CENTS, rounding=ROUND_HALF_UP)


def snippet(text: Optional[str], limit: int = 300) -> str:
    """截断，避免日志过大。"""
    return (text or "")[:limit]


class CarrierAdapter(ABC):
    carrier_id: ClassVar[str]
    required_credentials: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, endpoint: str, http: CarrierHttpClient) -> None:
        self.endpoint = endpoint
        self.http = http


    # ---------- Public ----------
    def quote(self, tariff: TariffAccount, request: ShipmentRequest) -> CarrierQuoteResult:
        """对一个 tariff 询价一次；成功返回 cost，失败返回分类后的 failure。"""
        started = time.monotonic()
        try:
            cost = self.fetch_cost(tariff, request)
        except CarrierError as e:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.warning(
                "%s tariff=%s no quote: %s (%s)",
                self.carrier_id, tariff.name, e.kind.value, snippet(str(e)),
            )
            return CarrierQuoteResult.failed(self.carrier_id, tariff.name, e, elapsed_ms=elapsed)

        elapsed = int((time.monotonic() - started) * 1000)
        logger.info("%s tariff=%s cost=%s (%dms)", self.carrier_id, tariff.name, cost, elapsed)
        return CarrierQuoteResult.success(self.carrier_id, tariff.name, cost, elapsed_ms=elapsed)

    def fetch_cost(self, tariff: TariffAccount, request: ShipmentRequest) -> Decimal:
        """同 quote()，但失败时直接抛 CarrierError。"""
        self.check_credentials(tariff)
        self.validate(request)
        call = self.build_call(tariff, request)
        resp = self.http.post(self.endpoint, data=call.body, headers=call.headers, params=call.params)
        return self.parse_response(resp)

    def check_credentials(self, tariff: TariffAccount) -> None:
        missing = [k for k in self.required_credentials if not tariff.credential(k)]
        if missing:
            raise CredentialError(f"tariff {tariff.name} missing credentials: {', '.join(missing)}")


    # ---------- 子类实现 ----------
    @abstractmethod
    def validate(self, request: ShipmentRequest) -> None:
        """缺少本承运商必填字段时抛 ValidationError（不发请求）。"""

    @abstractmethod
    def build_call(self, tariff: TariffAccount, request: ShipmentRequest) -> PreparedCall:
        ...

    @abstractmethod
    def parse_response(self, resp: requests.Response) -> Decimal:
        ...


    # ---------- Helpers ----------
    @staticmethod
    def _require(condition: bool, message: str) -> None:
        if not condition:
            raise ValidationError(message)

    @staticmethod
    def _raise_for_bare_status(resp: requests.Response) -> None:
        """响应体里没有可识别的 fault 时，按状态码归类。"""
        if resp.status_code >= 500:
            raise NetworkError(f"{resp.status_code} server error: {snippet(resp.text)}")
        if resp.status_code >= 400:
            raise CarrierRejected(f"{resp.status_code} client error: {snippet(resp.text)}")
