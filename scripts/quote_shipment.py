"""
对单个运单询价（不起 API，直接跑完整流程并写历史表）

用法：
    export $(grep -v '^#' .env | xargs)   # 若你用 .env
    python scripts/quote_shipment.py shipment.json carriers.json

shipment.json  = ShipmentRequest（origin / destination / commodities ...）
carriers.json  = [{"carrier_id": "estes", "tariffs": [...], "allowed": ["..."]}, ...]
"""

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from ratehub.core.config import settings
from ratehub.core.logging import configure_logging
from ratehub.db import create_all
from ratehub.schemas.quote import QuoteRequestBody
from ratehub.services.pricing.errors import InvalidShipmentError
from ratehub.services.pricing.quote_engine import create_pricing_engine
from ratehub.utils.serialization import to_jsonable


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Rate-shop one LTL shipment across configured carriers.")
    parser.add_argument("shipment", type=Path, help="shipment request JSON file")
    parser.add_argument("carriers", type=Path, help="carrier tariffs + allow-list JSON file")
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)

    try:
        body = QuoteRequestBody.model_validate({
            "shipment": json.loads(args.shipment.read_text(encoding="utf-8")),
            "carriers": json.loads(args.carriers.read_text(encoding="utf-8")),
        })
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"invalid input: {e}", file=sys.stderr)
        return 2

    create_all()
    engine = create_pricing_engine()
    try:
        result = engine.price_shipment(body.shipment, body.carrier_tariffs(), body.permissions())
    except InvalidShipmentError as e:
        print(f"invalid shipment: {e}", file=sys.stderr)
        return 2

    print(json.dumps(to_jsonable({
        "quotes": result.quotes,
        "skipped": result.skipped,
        "history_errors": result.history_errors,
        "ok": result.ok,
    }), indent=2, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
