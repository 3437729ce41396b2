"""定价侧异常：计算失败 / 运单结构非法 / 历史表写入失败。"""


class PricingError(Exception):
    """Base for pricing-side errors."""


class CalculationError(PricingError):
    """No price can be computed: margin out of range and no historical average."""


class InvalidShipmentError(PricingError):
    """Structurally invalid shipment request (e.g. no commodity lines); fatal for the run."""


class HistoryWriteError(PricingError):
    """A final quote could not be appended to the history log."""
