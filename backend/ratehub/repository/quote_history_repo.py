# 报价历史表相关的 DB 操作（只追加 + 按 lane 读取）

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.orm import Session

from ratehub.db.model.quote_history import QuoteHistory


"""
追加一行历史记录；只 flush 不 commit，事务由调用方（history_index）控制。
row 的键与 QuoteHistory 列名一致。
"""
def append_quote_history(db: Session, row: Dict[str, Any]) -> QuoteHistory:
    rec = QuoteHistory(**row)
    db.add(rec)
    db.flush()
    return rec


"""
按 lane 读取候选记录：3 位邮编前缀 + freight class 精确匹配 + 时间窗口，在 SQL 里过滤；
weight / price 以字符串取回，由上层逐条解析（脏数据逐条跳过，不让整个查询失败）。
返回 [(weight_raw, price_raw), ...]
"""
def fetch_lane_candidates(
    db: Session,
    *,
    origin_zip3: str,
    dest_zip3: str,
    freight_class: str,
    since: datetime,
) -> List[Tuple[Optional[str], Optional[str]]]:
    stmt = (
        select(
            sa.cast(QuoteHistory.weight, sa.String),
            sa.cast(QuoteHistory.price, sa.String),
        )
        .where(QuoteHistory.origin_zip3 == origin_zip3)
        .where(QuoteHistory.dest_zip3 == dest_zip3)
        .where(QuoteHistory.freight_class == freight_class)
        .where(QuoteHistory.booked_at >= since)
    )
    return [(w, p) for w, p in db.execute(stmt).all()]


"""最近的历史记录（API 查看用），按时间倒序。"""
def fetch_recent_history(
    db: Session,
    *,
    carrier_id: Optional[str] = None,
    limit: int = 50,
) -> List[QuoteHistory]:
    stmt = select(QuoteHistory).order_by(QuoteHistory.booked_at.desc(), QuoteHistory.id.desc()).limit(limit)
    if carrier_id:
        stmt = stmt.where(QuoteHistory.carrier_id == carrier_id)
    return list(db.execute(stmt).scalars().all())
