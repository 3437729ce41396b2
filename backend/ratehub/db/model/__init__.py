# 聚合导入所有模型

from .quote_history import QuoteHistory

__all__ = ["QuoteHistory"]
