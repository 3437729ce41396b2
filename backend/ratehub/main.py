from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ratehub.core.config import settings
from ratehub.core.logging import configure_logging
from ratehub.api.v1 import api_v1
from ratehub.db import create_all, dispose_engine

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # 历史表只追加，没有迁移；启动时确保存在
    create_all()
    yield
    dispose_engine()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# 从环境读取前端白名单（逗号分隔）。本地可配：
# BACKEND_CORS_ORIGINS=http://localhost:5173,https://broker.local.test:5173
origins = [o.strip() for o in settings.BACKEND_CORS_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


app.include_router(api_v1, prefix=settings.API_PREFIX)

# 根路径健康探活（方便测试或 Docker 健康检查）
@app.get("/")
def root():
    return {
        "app": settings.PROJECT_NAME,
        "env": settings.ENVIRONMENT,
        "ok": True
    }
