# 健康检查（含历史库探活）

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from ratehub.db.session import engine

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    # 历史库不可用不影响询价（只是没有历史均价），所以这里只报告状态不返回 5xx
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "unavailable"
    return {"status": "ok", "history_db": db_status}
