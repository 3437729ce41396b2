# 标准化的运单请求（所有承运商 adapter 的共同输入）
# 默认值在边界（API / 脚本）这里统一补齐，核心流程不再做 "有没有这个字段" 的判断

from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


PayerRole = Literal["shipper", "consignee", "third_party"]


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    postal_code: str = Field(..., min_length=3, max_length=10)
    city: Optional[str] = None
    state: Optional[str] = Field(None, description="2-letter state/province code")
    country: str = "US"

    @field_validator("postal_code")
    @classmethod
    def _strip_postal(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) < 3:
            raise ValueError("postal_code must have at least 3 characters")
        return v

    @field_validator("city")
    @classmethod
    def _strip_city(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("state")
    @classmethod
    def _normalize_state(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError("state must be a 2-letter code")
        return v

    @field_validator("country")
    @classmethod
    def _normalize_country(cls, v: str) -> str:
        return (v or "US").strip().upper()

    @property
    def zip3(self) -> str:
        """3 位邮编前缀（历史价格按 lane 匹配用）。"""
        return self.postal_code[:3]


class CommodityLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: Decimal = Field(..., gt=0, description="line weight, lb")
    freight_class: str = Field(..., min_length=2, max_length=5)
    pieces: int = Field(1, ge=1)

    # 尺寸（英寸）；部分承运商要求必填
    length: Optional[Decimal] = Field(None, gt=0)
    width: Optional[Decimal] = Field(None, gt=0)
    height: Optional[Decimal] = Field(None, gt=0)

    packaging: str = "PLT"
    stackable: bool = False
    description: Optional[str] = None

    @field_validator("freight_class", mode="before")
    @classmethod
    def _class_as_str(cls, v) -> str:
        # 55 / "55" / " 55 " 都归一成 "55"；77.5 这种保留小数
        if isinstance(v, (int, float, Decimal)):
            v = format(Decimal(str(v)).normalize(), "f")
        return str(v).strip()

    @property
    def has_dimensions(self) -> bool:
        return self.length is not None and self.width is not None and self.height is not None


class ShipmentRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: Location
    destination: Location
    commodities: List[CommodityLine] = Field(default_factory=list)
    payer: Optional[PayerRole] = None
    pickup_date: Optional[date] = None

    @property
    def total_weight(self) -> Decimal:
        return sum((c.weight for c in self.commodities), Decimal("0"))

    @property
    def rating_class(self) -> Optional[str]:
        """最重那一行的 freight class（并列取第一行），用于历史价格匹配。"""
        if not self.commodities:
            return None
        heaviest = self.commodities[0]
        for line in self.commodities[1:]:
            if line.weight > heaviest.weight:
                heaviest = line
        return heaviest.freight_class
