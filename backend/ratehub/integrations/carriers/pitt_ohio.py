"""
Pitt Ohio 报价：JSON over HTTPS
   - 鉴权：access code 放 header（X-Access-Code），customer number 放 body；
   - 只服务美国/加拿大邮编（US 5 位数字，CA 6 位字母数字）；
   - 响应：{"errors": [{"code": "...", "message": "..."}], "rateQuote": {"netCharge": "1234.56"}}
     errors 非空 → CarrierRejected。
"""

from __future__ import annotations
import json, logging, re
from decimal import Decimal
from typing import Any, Dict

import requests

from ratehub.integrations.carriers.base import CarrierAdapter, PreparedCall, parse_charge, snippet
from ratehub.integrations.carriers.errors import CarrierRejected, InvalidResponse
from ratehub.schemas.carrier import TariffAccount
from ratehub.schemas.shipment import Location, ShipmentRequest

logger = logging.getLogger(__name__)


_US_ZIP = re.compile(r"^\d{5}$")
_CA_POSTAL = re.compile(r"^[A-Z]\d[A-Z]\s?\d[A-Z]\d$")


def _postal_ok(loc: Location) -> bool:
    if loc.country == "US":
        return bool(_US_ZIP.match(loc.postal_code))
    if loc.country == "CA":
        return bool(_CA_POSTAL.match(loc.postal_code))
    return False


class PittOhioAdapter(CarrierAdapter):
    carrier_id = "pitt_ohio"
    required_credentials = ("access_code", "customer_number")

    def validate(self, request: ShipmentRequest) -> None:
        self._require(_postal_ok(request.origin), f"pitt_ohio cannot rate origin {request.origin.postal_code}")
        self._require(_postal_ok(request.destination), f"pitt_ohio cannot rate destination {request.destination.postal_code}")
        self._require(bool(request.commodities), "pitt_ohio requires at least one commodity line")

    def build_call(self, tariff: TariffAccount, request: ShipmentRequest) -> PreparedCall:
        payload: Dict[str, Any] = {
            "customerNumber": tariff.credential("customer_number"),
            "origin": {"zip": request.origin.postal_code, "country": request.origin.country},
            "destination": {"zip": request.destination.postal_code, "country": request.destination.country},
            "payer": request.payer or "shipper",
            "items": [
                {"class": line.freight_class, "weight": str(line.weight), "pieces": line.pieces}
                for line in request.commodities
            ],
        }
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Access-Code": tariff.credential("access_code") or "",
        }
        return PreparedCall(body=body, headers=headers)

    def parse_response(self, resp: requests.Response) -> Decimal:
        try:
            data = resp.json()
        except ValueError as e:
            self._raise_for_bare_status(resp)
            raise InvalidResponse(f"non-JSON response (status={resp.status_code}): {snippet(resp.text)}") from e

        if not isinstance(data, dict):
            self._raise_for_bare_status(resp)
            raise InvalidResponse(f"unexpected payload type: {type(data).__name__}")

        errors = data.get("errors") or []
        if errors:
            if isinstance(errors, list):
                text = "; ".join(
                    f"{e.get('code', '?')}: {e.get('message', '')}" if isinstance(e, dict) else str(e)
                    for e in errors
                )
            else:
                text = str(errors)
            raise CarrierRejected(f"pitt_ohio errors: {snippet(text)}")

        self._raise_for_bare_status(resp)

        rate = data.get("rateQuote") or {}
        if not isinstance(rate, dict):
            raise InvalidResponse("pitt_ohio rateQuote node is not an object")
        return parse_charge(rate.get("netCharge"))
