"""
根路径与健康检查
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
def root(request: Request):
    """根路径"""
    settings = request.app.state.settings
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


@router.get("/health")
def health_check(request: Request):
    """健康检查接口"""
    return {
        "status": "ok",
        "message": f"{request.app.state.settings.APP_NAME} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
