"""
低层 HTTP 客户端：超时/重试/传输层错误归类
  - 所有承运商 adapter 共用一个 requests.Session；
  - 每次调用带 (connect, read) 超时；
  - 只对超时/网络异常做有限次指数退避重试（默认 0 次，即参考行为）；
  - 不解析业务字段，也不根据状态码抛错：SOAP Fault 经常跟着 500 返回，交给 adapter 判断。
"""

from __future__ import annotations
import logging, time
from typing import Any, Dict, Optional

import requests

from ratehub.integrations.carriers.errors import NetworkError, Timeout
from ratehub.utils.backoff import calc_next_delay

logger = logging.getLogger(__name__)


class CarrierHttpClient:
    """承运商报价接口的低层 HTTP 客户端。"""

    def __init__(
        self,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
        retries: int = 0,
        backoff_sec: float = 1.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """允许注入自定义 Session，便于测试。"""
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.retries = max(0, retries)
        self.backoff_sec = backoff_sec
        self._session = session or requests.Session()

    @classmethod
    def from_context(cls, ctx, session: Optional[requests.Session] = None) -> "CarrierHttpClient":
        return cls(
            connect_timeout=ctx.connect_timeout,
            read_timeout=ctx.read_timeout,
            retries=ctx.http_retries,
            backoff_sec=ctx.retry_backoff_sec,
            session=session,
        )


    # ---------- Public ----------
    def post(
        self,
        url: str,
        *,
        data: Optional[str | bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """发送一次 POST；超时 → Timeout，其他传输异常 → NetworkError（重试用尽后）。"""
        timeout = (self.connect_timeout, self.read_timeout)
        max_attempts = self.retries + 1

        for attempt in range(1, max_attempts + 1):
            try:
                resp = self._session.post(url, data=data, headers=headers or {}, params=params, timeout=timeout)
                logger.debug("carrier response: POST %s -> %s", url, resp.status_code)
                return resp
            except requests.Timeout as e:
                if attempt >= max_attempts:
                    raise Timeout(f"timed out after {self.read_timeout}s: {url}") from e
                err: Exception = e
            except requests.RequestException as e:
                if attempt >= max_attempts:
                    raise NetworkError(f"request error: {e}") from e
                err = e

            delay = calc_next_delay(attempt, base_seconds=self.backoff_sec)
            logger.info(
                "carrier call attempt %d/%d failed: %s; retrying in %.1fs",
                attempt, max_attempts, err, delay,
            )
            time.sleep(delay)

        # 理论上不会走到这里
        raise NetworkError("unreachable retry loop")

    def close(self) -> None:
        self._session.close()
