from __future__ import annotations
import calendar
from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)  # 与 DB naive UTC 对齐


def months_before(moment: datetime, months: int) -> datetime:
    """
    往前推 N 个自然月；目标月没有该日时取月末（3/31 往前 1 个月 → 2/28 或 2/29）。
    """
    total = moment.year * 12 + (moment.month - 1) - months
    year, month0 = divmod(total, 12)
    month = month0 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
