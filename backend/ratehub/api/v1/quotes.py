# 报价接口 -> 前端询价页面 / 其他服务调用

from __future__ import annotations
import logging
from functools import lru_cache
from typing import Generator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ratehub.db.session import SessionLocal
from ratehub.repository.quote_history_repo import fetch_recent_history
from ratehub.schemas.quote import QuoteHistoryOut, QuoteRequestBody, QuoteRunOut
from ratehub.services.pricing.errors import InvalidShipmentError
from ratehub.services.pricing.quote_engine import QuotePricingEngine, create_pricing_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quotes"])


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# engine 持有共享的 requests.Session 和线程安全的历史索引，进程内复用一个
@lru_cache(maxsize=1)
def get_pricing_engine() -> QuotePricingEngine:
    return create_pricing_engine()


@router.post("/quotes", response_model=QuoteRunOut)
def create_quotes(body: QuoteRequestBody, engine: QuotePricingEngine = Depends(get_pricing_engine)):
    try:
        result = engine.price_shipment(body.shipment, body.carrier_tariffs(), body.permissions())
    except InvalidShipmentError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return QuoteRunOut.from_result(result)


@router.get("/quotes/history", response_model=List[QuoteHistoryOut])
def list_quote_history(
    carrier_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = fetch_recent_history(db, carrier_id=carrier_id, limit=limit)
    return [QuoteHistoryOut.model_validate(r) for r in rows]
