# ORM 基类 + 约束/索引命名规范

from __future__ import annotations
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import MetaData

# 命名固定下来，换库（SQLite → PostgreSQL）重建表时索引名不变
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


# 所有表模型（目前只有 QuoteHistory）都继承这个 Base
class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
