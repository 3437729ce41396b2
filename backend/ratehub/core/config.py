# 环境变量和配置
# pydantic‑settings 读取 .env = core/config.py

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# 本机直接跑 uvicorn / scripts 时，会读取 backend/.env

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # ========= project config =========
    PROJECT_NAME: str = "LTL Rate Hub"
    ENVIRONMENT: str = "dev"
    API_PREFIX: str = "/api/v1"
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = Field("INFO", alias="LOG_LEVEL")


    # ========= Database（报价历史表） =========
    # 默认本地 SQLite 文件；生产可换成 postgresql+psycopg://...
    DATABASE_URL: str = Field(
        default="sqlite:///./quote_history.db",
        alias="DATABASE_URL",
    )


    # ========= Carrier HTTP 层 =========
    CARRIER_CONNECT_TIMEOUT: int = Field(10, ge=1, alias="CARRIER_CONNECT_TIMEOUT")
    CARRIER_READ_TIMEOUT: int = Field(30, ge=1, alias="CARRIER_READ_TIMEOUT")
    # 整个 fan-out 的等待上限；超出仍未返回的任务记为 timeout
    CARRIER_RUN_TIMEOUT: int = Field(45, ge=1, alias="CARRIER_RUN_TIMEOUT")
    CARRIER_MAX_WORKERS: int = Field(8, ge=1, le=64, alias="CARRIER_MAX_WORKERS")
    # 参考行为不重试；只对 timeout / network 错误生效
    CARRIER_HTTP_RETRIES: int = Field(0, ge=0, le=5, alias="CARRIER_HTTP_RETRIES")
    CARRIER_RETRY_BACKOFF_SEC: float = Field(1.0, ge=0.0, alias="CARRIER_RETRY_BACKOFF_SEC")


    # ========= Carrier endpoints（为空则该承运商不启用） =========
    ESTES_ENDPOINT: Optional[str] = Field(None, alias="ESTES_ENDPOINT")
    AAA_COOPER_ENDPOINT: Optional[str] = Field(None, alias="AAA_COOPER_ENDPOINT")
    PITT_OHIO_ENDPOINT: Optional[str] = Field(None, alias="PITT_OHIO_ENDPOINT")


    # ========= Pricing config =========
    DEFAULT_MARGIN_PCT: float = Field(20.0, ge=0.0, lt=100.0, alias="DEFAULT_MARGIN_PCT")
    HISTORY_WEIGHT_TOLERANCE_PCT: float = Field(10.0, ge=0.0, le=100.0, alias="HISTORY_WEIGHT_TOLERANCE_PCT")
    HISTORY_WINDOW_MONTHS: int = Field(12, ge=1, le=120, alias="HISTORY_WINDOW_MONTHS")


    @property
    def carrier_endpoints(self) -> dict[str, Optional[str]]:
        return {
            "estes": self.ESTES_ENDPOINT,
            "aaa_cooper": self.AAA_COOPER_ENDPOINT,
            "pitt_ohio": self.PITT_OHIO_ENDPOINT,
        }


settings = Settings()  # 只从环境读取（含 .env）
