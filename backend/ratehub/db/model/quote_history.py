from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Integer, Numeric, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from ratehub.db.base import Base


# 报价历史表：只追加，不更新；每条成功的 FinalQuote 写一行，供历史均价查询
class QuoteHistory(Base):
    __tablename__ = "quote_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    booked_at:   Mapped[datetime] = mapped_column(DateTime, nullable=False)     # 报价时间（naive UTC）
    carrier_id:  Mapped[str] = mapped_column(String(32), nullable=False)
    tariff_name: Mapped[str] = mapped_column(String(128), nullable=False)

    origin_zip:  Mapped[str] = mapped_column(String(10), nullable=False)
    origin_zip3: Mapped[str] = mapped_column(String(3), nullable=False)         # lane 匹配用 3 位前缀
    dest_zip:    Mapped[str] = mapped_column(String(10), nullable=False)
    dest_zip3:   Mapped[str] = mapped_column(String(3), nullable=False)

    weight:        Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))    # 总重量 lb
    freight_class: Mapped[str] = mapped_column(String(8), nullable=False)
    lowest_cost:   Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))    # 承运商最低成本
    price:         Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))    # 最终对客报价（历史均价取这个）

    __table_args__ = (
        Index("ix_quote_history_lane", "origin_zip3", "dest_zip3", "freight_class", "booked_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<QuoteHistory {self.carrier_id}/{self.tariff_name} "
            f"{self.origin_zip}->{self.dest_zip} {self.weight}lb class={self.freight_class} price={self.price}>"
        )
