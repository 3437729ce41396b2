from decimal import Decimal
from xml.etree import ElementTree

import pytest
import requests

from ratehub.integrations.carriers import CarrierHttpClient, EstesSoapAdapter
from ratehub.integrations.carriers.estes_soap import RATE_NS, SOAP_ACTION
from ratehub.schemas.carrier import QuoteFailureKind

ENDPOINT = "https://estes.test/rating"

OK_BODY = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"><soap:Body>'
    '<rateQuote xmlns="http://ws.estesexpress.com/schema/2019/01/ratequote">'
    "<quoteInfo><quote><pricing><standardPrice>{price}</standardPrice></pricing></quote></quoteInfo>"
    "</rateQuote></soap:Body></soap:Envelope>"
)

FAULT_BODY = (
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"><soap:Body>'
    "<soap:Fault><faultcode>soap:Client</faultcode>"
    "<faultstring>Invalid account number</faultstring></soap:Fault>"
    "</soap:Body></soap:Envelope>"
)


@pytest.fixture
def tariff(tariff_factory):
    return tariff_factory("estes", "ESTES-STD", username="api<user>", password="p&ss", account="0123456")


def _adapter(session):
    return EstesSoapAdapter(ENDPOINT, CarrierHttpClient(session=session))


def test_success_reads_standard_price(fake_session_cls, response_factory, tariff, shipment):
    session = fake_session_cls([response_factory(200, OK_BODY.format(price="$1,205.37"), "text/xml")])

    result = _adapter(session).quote(tariff, shipment)

    assert result.ok
    assert result.cost == Decimal("1205.37")
    assert result.elapsed_ms is not None
    call = session.calls[0]
    assert call["url"] == ENDPOINT
    assert call["headers"]["SOAPAction"] == SOAP_ACTION
    assert call["headers"]["Content-Type"].startswith("text/xml")


def test_envelope_is_well_formed_and_escaped(tariff, make_shipment):
    request = make_shipment(
        pickup_date="2026-07-01",
        commodities=[{"weight": 500, "freight_class": 70, "description": "Tools & <parts>"}],
    )
    call = _adapter(None).build_call(tariff, request)

    root = ElementTree.fromstring(call.body.encode("utf-8"))
    ns = {"r": RATE_NS}
    assert root.find(".//r:account", ns).text == "0123456"
    assert root.find(".//r:originPoint/r:postalCode", ns).text == "30301"
    assert root.find(".//r:destinationPoint/r:stateProvince", ns).text == "CA"
    assert root.find(".//r:payor", ns).text == "S"
    assert root.find(".//r:terms", ns).text == "PPD"
    assert root.find(".//r:pickupDate", ns).text == "2026-07-01"
    assert root.find(".//r:commodity/r:class", ns).text == "70"
    assert root.find(".//r:commodity/r:description", ns).text == "Tools & <parts>"
    # 没有尺寸时不发送 length/width/height
    assert root.find(".//r:commodity/r:length", ns) is None
    assert "api&lt;user&gt;" in call.body and "p&amp;ss" in call.body


def test_consignee_payer_maps_to_collect(tariff, make_shipment):
    call = _adapter(None).build_call(tariff, make_shipment(payer="consignee"))
    assert "<rat1:payor>C</rat1:payor>" in call.body
    assert "<rat1:terms>COL</rat1:terms>" in call.body


def test_fault_with_http_500_is_rejected(fake_session_cls, response_factory, tariff, shipment):
    session = fake_session_cls([response_factory(500, FAULT_BODY, "text/xml")])
    result = _adapter(session).quote(tariff, shipment)
    assert result.failure is QuoteFailureKind.REJECTED
    assert "Invalid account number" in result.message


@pytest.mark.parametrize(
    "status, body, kind",
    [
        (503, "<html>Service Unavailable</html", QuoteFailureKind.NETWORK),
        (404, "not found", QuoteFailureKind.REJECTED),
        (200, "not xml at all", QuoteFailureKind.INVALID_RESPONSE),
        (200, OK_BODY.format(price="0.00"), QuoteFailureKind.INVALID_RESPONSE),
        (200, OK_BODY.replace("standardPrice", "netPrice").format(price="1"), QuoteFailureKind.INVALID_RESPONSE),
        (502, OK_BODY.format(price="100"), QuoteFailureKind.NETWORK),
    ],
)
def test_response_classification(fake_session_cls, response_factory, tariff, shipment, status, body, kind):
    session = fake_session_cls([response_factory(status, body, "text/xml")])
    assert _adapter(session).quote(tariff, shipment).failure is kind


def test_transport_timeout(fake_session_cls, tariff, shipment):
    session = fake_session_cls([requests.ReadTimeout("slow")])
    assert _adapter(session).quote(tariff, shipment).failure is QuoteFailureKind.TIMEOUT


def test_missing_credentials_never_calls_network(fake_session_cls, tariff_factory, shipment):
    session = fake_session_cls()
    tariff = tariff_factory("estes", "NOPASS", username="u", password="  ", account="1")

    result = _adapter(session).quote(tariff, shipment)

    assert result.failure is QuoteFailureKind.CREDENTIAL
    assert "password" in result.message
    assert session.calls == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"payer": None},
        {"origin": {"postal_code": "30301", "state": "GA"}},
        {"destination": {"postal_code": "90210", "city": "Beverly Hills"}},
    ],
)
def test_missing_required_fields_is_validation(fake_session_cls, tariff, make_shipment, overrides):
    session = fake_session_cls()
    result = _adapter(session).quote(tariff, make_shipment(**overrides))
    assert result.failure is QuoteFailureKind.VALIDATION
    assert session.calls == []


def test_third_party_payer_maps_to_prepaid(tariff, make_shipment):
    call = _adapter(None).build_call(tariff, make_shipment(payer="third_party"))
    assert "<rat1:payor>T</rat1:payor>" in call.body
    assert "<rat1:terms>PPD</rat1:terms>" in call.body
