from fastapi import APIRouter

from .routes_health import router as health_router
from .quotes import router as quotes_router


# 认证由上游网关负责，这里不挂登录依赖
api_v1 = APIRouter()
api_v1.include_router(health_router)      # /health
api_v1.include_router(quotes_router)      # /quotes, /quotes/history
