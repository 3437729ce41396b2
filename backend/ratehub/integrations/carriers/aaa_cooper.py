"""
AAA Cooper 报价：JSON over HTTPS
   - 鉴权：api_key 作为 query 参数；
   - 必填：每一行货物的长宽高；
   - 响应：{"status": "PASS"|"WARNING"|"FAIL", "messages": [...], "quote": {"totalCharge": "$1,234.56"}}
     FAIL → CarrierRejected；WARNING 视为成功，但把 messages 打到日志。
"""

from __future__ import annotations
import json, logging
from decimal import Decimal
from typing import Any, Dict, List

import requests

from ratehub.integrations.carriers.base import CarrierAdapter, PreparedCall, parse_charge, snippet
from ratehub.integrations.carriers.errors import CarrierRejected, InvalidResponse
from ratehub.schemas.carrier import TariffAccount
from ratehub.schemas.shipment import ShipmentRequest

logger = logging.getLogger(__name__)


STATUS_PASS = "PASS"
STATUS_WARNING = "WARNING"
STATUS_FAIL = "FAIL"

_TERMS = {"shipper": "Prepaid", "consignee": "Collect", "third_party": "ThirdParty"}


class AAACooperAdapter(CarrierAdapter):
    carrier_id = "aaa_cooper"
    required_credentials = ("api_key",)

    def validate(self, request: ShipmentRequest) -> None:
        self._require(bool(request.commodities), "aaa_cooper requires at least one commodity line")
        for idx, line in enumerate(request.commodities, start=1):
            self._require(line.has_dimensions, f"aaa_cooper requires dimensions on commodity line {idx}")

    def build_call(self, tariff: TariffAccount, request: ShipmentRequest) -> PreparedCall:
        payload: Dict[str, Any] = {
            "OriginZip": request.origin.postal_code,
            "OriginCity": request.origin.city,
            "OriginState": request.origin.state,
            "OriginCountry": request.origin.country,
            "DestinationZip": request.destination.postal_code,
            "DestinationCity": request.destination.city,
            "DestinationState": request.destination.state,
            "DestinationCountry": request.destination.country,
            "Terms": _TERMS.get(request.payer or "shipper", "Prepaid"),
            "Items": [
                {
                    "Class": line.freight_class,
                    "Weight": str(line.weight),
                    "Pieces": line.pieces,
                    "HandlingUnit": line.packaging,
                    "Length": str(line.length),
                    "Width": str(line.width),
                    "Height": str(line.height),
                    "Stackable": line.stackable,
                    "Description": line.description,
                }
                for line in request.commodities
            ],
        }
        if request.pickup_date:
            payload["PickupDate"] = request.pickup_date.isoformat()

        # 紧凑 JSON；json.dumps 负责字符串转义
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        params = {"api_key": tariff.credential("api_key")}
        return PreparedCall(body=body, headers=headers, params=params)

    def parse_response(self, resp: requests.Response) -> Decimal:
        try:
            data = resp.json()
        except ValueError as e:
            self._raise_for_bare_status(resp)
            raise InvalidResponse(f"non-JSON response (status={resp.status_code}): {snippet(resp.text)}") from e

        if not isinstance(data, dict):
            self._raise_for_bare_status(resp)
            raise InvalidResponse(f"unexpected payload type: {type(data).__name__}")

        status = str(data.get("status") or "").strip().upper()
        messages = _messages(data.get("messages"))

        if status == STATUS_FAIL:
            raise CarrierRejected(f"aaa_cooper FAIL: {snippet('; '.join(messages))}")

        self._raise_for_bare_status(resp)

        if status == STATUS_WARNING:
            logger.warning("aaa_cooper WARNING: %s", snippet("; ".join(messages)))
        elif status != STATUS_PASS:
            raise InvalidResponse(f"aaa_cooper unknown status: {status or '<empty>'}")

        quote = data.get("quote") or {}
        if not isinstance(quote, dict):
            raise InvalidResponse("aaa_cooper quote node is not an object")
        return parse_charge(quote.get("totalCharge"))


def _messages(raw: Any) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        out = []
        for m in raw:
            if isinstance(m, dict):
                out.append(str(m.get("message") or m.get("text") or m))
            else:
                out.append(str(m))
        return out
    return [str(raw)]
