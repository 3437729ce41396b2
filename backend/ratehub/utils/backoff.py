from __future__ import annotations
import random


def calc_next_delay(attempts: int, base_seconds: float = 1.0, max_seconds: float = 60.0) -> float:
    """
    指数退避：1次失败→base，之后翻倍，直到 max_seconds；再加 0~25% 抖动。
    attempts: 已失败次数（>=1）
    """
    attempts = max(1, attempts)
    delay = min(max_seconds, base_seconds * (2 ** (attempts - 1)))
    return delay + random.uniform(0, 0.25 * delay)
