"""
Estes 报价：SOAP 1.1 / XML
   - 鉴权：user + password 放在 SOAP Header，account 放在 Body；
   - 必填：起止城市 + 州、付款方（payor）；
   - 响应：<Fault> → CarrierRejected；否则读 <standardPrice>（任意命名空间）。
"""

from __future__ import annotations
import logging, uuid
from decimal import Decimal
from typing import Iterable, Optional
from xml.etree import ElementTree
from xml.sax.saxutils import escape

import requests

from ratehub.integrations.carriers.base import CarrierAdapter, PreparedCall, parse_charge, snippet
from ratehub.integrations.carriers.errors import CarrierRejected, InvalidResponse
from ratehub.schemas.carrier import TariffAccount
from ratehub.schemas.shipment import CommodityLine, Location, ShipmentRequest

logger = logging.getLogger(__name__)


SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
AUTH_NS = "http://ws.estesexpress.com/ratequote"
RATE_NS = "http://ws.estesexpress.com/schema/2019/01/ratequote"
SOAP_ACTION = "http://ws.estesexpress.com/ratequote/getQuote"

# 付款方 → Estes payor 代码 + 付款条款
_PAYOR_CODES = {
    "shipper": ("S", "PPD"),
    "consignee": ("C", "COL"),
    "third_party": ("T", "PPD"),
}


def _x(value) -> str:
    """所有来自用户输入的字符串都要 XML 转义。"""
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find_local(root: ElementTree.Element, name: str) -> Optional[ElementTree.Element]:
    for el in root.iter():
        if _local(el.tag) == name:
            return el
    return None


class EstesSoapAdapter(CarrierAdapter):
    carrier_id = "estes"
    required_credentials = ("username", "password", "account")

    def validate(self, request: ShipmentRequest) -> None:
        for label, loc in (("origin", request.origin), ("destination", request.destination)):
            self._require(bool(loc.city), f"estes requires {label} city")
            self._require(bool(loc.state), f"estes requires {label} state")
        self._require(request.payer is not None, "estes requires a payer designation")
        self._require(bool(request.commodities), "estes requires at least one commodity line")


    # ---------- 报文 ----------
    def build_call(self, tariff: TariffAccount, request: ShipmentRequest) -> PreparedCall:
        payor, terms = _PAYOR_CODES[request.payer]
        pickup = f"<rat1:pickupDate>{request.pickup_date.isoformat()}</rat1:pickupDate>" if request.pickup_date else ""
        body = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<soapenv:Envelope xmlns:soapenv="{SOAP_ENV_NS}" xmlns:rat="{AUTH_NS}" xmlns:rat1="{RATE_NS}">'
            "<soapenv:Header><rat:auth>"
            f"<rat:user>{_x(tariff.credential('username'))}</rat:user>"
            f"<rat:password>{_x(tariff.credential('password'))}</rat:password>"
            "</rat:auth></soapenv:Header>"
            "<soapenv:Body><rat1:rateRequest>"
            f"<rat1:requestID>{uuid.uuid4().hex[:20]}</rat1:requestID>"
            f"<rat1:account>{_x(tariff.credential('account'))}</rat1:account>"
            f"{self._point('originPoint', request.origin)}"
            f"{self._point('destinationPoint', request.destination)}"
            f"<rat1:payor>{payor}</rat1:payor>"
            f"<rat1:terms>{terms}</rat1:terms>"
            f"{pickup}"
            f"<rat1:baseCommodities>{self._commodities(request.commodities)}</rat1:baseCommodities>"
            "</rat1:rateRequest></soapenv:Body>"
            "</soapenv:Envelope>"
        )
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": SOAP_ACTION,
        }
        return PreparedCall(body=body, headers=headers)

    @staticmethod
    def _point(tag: str, loc: Location) -> str:
        return (
            f"<rat1:{tag}>"
            f"<rat1:countryCode>{_x(loc.country)}</rat1:countryCode>"
            f"<rat1:postalCode>{_x(loc.postal_code)}</rat1:postalCode>"
            f"<rat1:city>{_x(loc.city)}</rat1:city>"
            f"<rat1:stateProvince>{_x(loc.state)}</rat1:stateProvince>"
            f"</rat1:{tag}>"
        )

    @staticmethod
    def _commodities(lines: Iterable[CommodityLine]) -> str:
        parts = []
        for line in lines:
            dims = ""
            if line.has_dimensions:
                dims = (
                    f"<rat1:length>{line.length}</rat1:length>"
                    f"<rat1:width>{line.width}</rat1:width>"
                    f"<rat1:height>{line.height}</rat1:height>"
                )
            desc = f"<rat1:description>{_x(line.description)}</rat1:description>" if line.description else ""
            parts.append(
                "<rat1:commodity>"
                f"<rat1:class>{_x(line.freight_class)}</rat1:class>"
                f"<rat1:weight>{line.weight}</rat1:weight>"
                f"<rat1:pieces>{line.pieces}</rat1:pieces>"
                f"<rat1:pieceType>{_x(line.packaging)}</rat1:pieceType>"
                f"{dims}{desc}"
                "</rat1:commodity>"
            )
        return "".join(parts)


    # ---------- 响应 ----------
    def parse_response(self, resp: requests.Response) -> Decimal:
        text = resp.text or ""
        try:
            # 响应只来自配置好的承运商 endpoint，直接用标准库 ElementTree 解析
            root = ElementTree.fromstring(text.encode("utf-8"))
        except ElementTree.ParseError as e:
            # 不是 XML：先按状态码归类，2xx 才算 InvalidResponse
            self._raise_for_bare_status(resp)
            raise InvalidResponse(f"non-XML response (status={resp.status_code}): {snippet(text)}") from e

        fault = _find_local(root, "Fault")
        if fault is not None:
            reason = _find_local(fault, "faultstring")
            msg = (reason.text or "").strip() if reason is not None else "SOAP Fault"
            raise CarrierRejected(f"estes fault: {snippet(msg)}")

        self._raise_for_bare_status(resp)

        charge = _find_local(root, "standardPrice")
        if charge is None:
            raise InvalidResponse(f"estes response missing standardPrice: {snippet(text)}")
        return parse_charge((charge.text or "").strip())
