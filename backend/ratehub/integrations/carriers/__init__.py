"""
对外统一入口（Public Surface）：
- 从这里 import adapter / 错误类型，内部实现可自由演进。
- build_adapters() 按 PricingContext 里配置了 endpoint 的承运商构建 adapter。
"""

from typing import Dict, Type

from .base import CarrierAdapter, PreparedCall, parse_charge
from .http_client import CarrierHttpClient
from .estes_soap import EstesSoapAdapter
from .aaa_cooper import AAACooperAdapter
from .pitt_ohio import PittOhioAdapter

from .errors import (
    CarrierError, ValidationError, CredentialError, NetworkError, Timeout, CarrierRejected, InvalidResponse,
)


ADAPTER_CLASSES: Dict[str, Type[CarrierAdapter]] = {
    cls.carrier_id: cls
    for cls in (EstesSoapAdapter, AAACooperAdapter, PittOhioAdapter)
}


def get_adapter_class(carrier_id: str) -> Type[CarrierAdapter]:
    try:
        return ADAPTER_CLASSES[carrier_id]
    except KeyError:
        raise KeyError(f"unknown carrier: {carrier_id}") from None


def build_adapters(ctx, http: CarrierHttpClient = None) -> Dict[str, CarrierAdapter]:
    """只为配置了 endpoint 的承运商构建 adapter；所有 adapter 共用一个 http client。
    endpoint 配给了未知承运商 → KeyError（配置错误，启动时就暴露）。
    """
    http = http or CarrierHttpClient.from_context(ctx)
    adapters: Dict[str, CarrierAdapter] = {}
    for carrier_id, endpoint in ctx.endpoints.items():
        if not endpoint:
            continue
        adapters[carrier_id] = get_adapter_class(carrier_id)(endpoint, http)
    return adapters


__all__ = [
    "CarrierAdapter", "PreparedCall", "parse_charge", "CarrierHttpClient",
    "EstesSoapAdapter", "AAACooperAdapter", "PittOhioAdapter",
    "ADAPTER_CLASSES", "get_adapter_class", "build_adapters",
    "CarrierError", "ValidationError", "CredentialError", "NetworkError", "Timeout",
    "CarrierRejected", "InvalidResponse",
]
