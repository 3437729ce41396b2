"""
   承运商集成层专用异常类型。
   每个异常带一个 QuoteFailureKind，聚合层按 kind 归类 "这个 tariff 没有报价" 的原因。
"""

from ratehub.schemas.carrier import QuoteFailureKind


class CarrierError(Exception):
    """Base for all carrier adapter errors."""
    kind: QuoteFailureKind = QuoteFailureKind.NETWORK


class ValidationError(CarrierError):
    """Shipment is missing fields this carrier requires; raised before any network call."""
    kind = QuoteFailureKind.VALIDATION


class CredentialError(CarrierError):
    """Tariff record is missing auth fields this carrier requires."""
    kind = QuoteFailureKind.CREDENTIAL


class NetworkError(CarrierError):
    """Connection errors or 5xx responses without a carrier fault body."""
    kind = QuoteFailureKind.NETWORK


class Timeout(NetworkError):
    """Carrier did not answer within the configured timeout."""
    kind = QuoteFailureKind.TIMEOUT


class CarrierRejected(CarrierError):
    """Carrier signalled a fault (SOAP Fault, FAIL status, error array)."""
    kind = QuoteFailureKind.REJECTED


class InvalidResponse(CarrierError):
    """Charge field absent, unparsable or not positive."""
    kind = QuoteFailureKind.INVALID_RESPONSE
