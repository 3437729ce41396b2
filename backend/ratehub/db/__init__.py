# 导出入口，给脚本/启动时建表用

from .session import engine, SessionLocal, session_scope, dispose_engine
from ratehub.db.model import *  # 确保把所有模型加载进 Base.metadata
from .base import Base


"""
    报价历史只有一张追加写的表，启动时直接建表即可：
        python -c "from ratehub.db import create_all; create_all()"
"""
def create_all(bind=None) -> None:
    Base.metadata.create_all(bind=bind or engine)
