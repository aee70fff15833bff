"""
状态端点服务

提供 HTTP 接口供面板轮询：GET / 返回主机名与版本/消息标签。
"""

import logging
import socket
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from .config import AppConfig
from .fortunes import Fortunes
from .models import HealthResponse, StatusResponse

logger = logging.getLogger(__name__)


def create_app(config: AppConfig, fortunes: Optional[Fortunes] = None) -> FastAPI:
    """
    创建 FastAPI 应用实例

    配置了 fortune 且非空时，消息取随机 fortune，否则取固定消息。
    """
    hostname = config.server.hostname or socket.gethostname()
    message = config.server.message

    app = FastAPI(
        title="Version Monitor Status",
        version="1.0.0",
        description="版本滚动观测状态端点"
    )

    @app.middleware("http")
    async def log_elapsed(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} ({elapsed_ms:.2f}ms)")
        return response

    @app.get("/", response_model=StatusResponse)
    async def get_status():
        """获取当前状态标签"""
        if fortunes is not None and len(fortunes) > 0:
            return StatusResponse(hostname=hostname, message=fortunes.sample())
        return StatusResponse(hostname=hostname, message=message)

    @app.get("/health", response_model=HealthResponse)
    async def get_health():
        """健康检查端点"""
        return HealthResponse(status="ok")

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Status server is ready (addr={config.server.host}:{config.server.port})")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Status server shutting down...")

    return app


def run_server(config: AppConfig, fortunes: Optional[Fortunes] = None):
    """运行状态端点服务（阻塞直到退出）"""
    app = create_app(config, fortunes)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="info",
        access_log=False  # 我们用自己的日志
    )
