from __future__ import annotations
import logging
from typing import Dict, Iterable, Mapping, Optional

from ratehub.schemas.carrier import TariffAccount

logger = logging.getLogger(__name__)


def resolve_permitted_tariffs(
    all_tariffs: Mapping[str, TariffAccount],
    allowed: Iterable[str],
    carrier_id: Optional[str] = None,
) -> Dict[str, TariffAccount]:
    """
    按客户的 allow-list 过滤某承运商的全部 tariff。
    allow-list 里引用了已改名/已删除的 tariff 只打 warning，不报错；
    返回空 dict 表示 "该客户不能用这个承运商"。
    """
    permitted: Dict[str, TariffAccount] = {}
    unknown = []
    for name in sorted({str(n).strip() for n in allowed if n and str(n).strip()}):
        tariff = all_tariffs.get(name)
        if tariff is None:
            unknown.append(name)
            continue
        permitted[name] = tariff

    if unknown:
        logger.warning(
            "permission list references unknown tariffs (carrier=%s): %s",
            carrier_id or "?", ", ".join(unknown),
        )
    return permitted
