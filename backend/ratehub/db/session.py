# Engine/Session 工厂

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from ratehub.core.config import settings


def build_engine(url: str) -> Engine:
    """SQLite 需要允许跨线程（询价线程池之外的写入线程）；其他库走常规连接池参数。"""
    kwargs: Dict[str, Any] = {"echo": False, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=5,             # 常驻连接
            max_overflow=10,         # 高峰期额外连接
            pool_pre_ping=True,      # 连接失效探测
            pool_recycle=1800,       # 秒；半小时回收一次，防止长连接被中间设备断开
        )
    return create_engine(url, **kwargs)


# ---- Engine ----
engine = build_engine(settings.DATABASE_URL)


# ---- Session Factory ----
# 注意：autocommit=False, autoflush=False 更易控事务与 flush 时机
SessionLocal: sessionmaker[Session] = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,  # 提交后对象仍可用（减少再次查询）
    class_=Session,
    future=True,
)


# ---- 脚本/服务里的上下文管理器：成功提交，异常回滚 ----
@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    db: Session = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


"""
    释放连接池中的所有连接；在 FastAPI 的 shutdown 钩子中调用。
"""
def dispose_engine() -> None:
    engine.dispose()
