"""
FastAPI主应用入口
"""
import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException

from banyan.api import auth, health
from banyan.core.config import Settings, settings as default_settings
from banyan.core.exceptions import BaseAppException, RequestValidationFailed, UnauthorizedError
from banyan.core.logger import setup_logging
from banyan.core.responses import error_response
from banyan.core.tokens import TokenIssuer
from banyan.db.session import build_engine, build_session_factory, init_db
from banyan.repositories.user_repository import UserRepository
from banyan.services.auth_service import AuthService


def register_exception_handlers(app: FastAPI) -> None:
    """注册统一错误响应 {code, message, timestamp, path, method}"""

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        extra = None
        headers = None
        if isinstance(exc, RequestValidationFailed):
            extra = {"errors": exc.errors}
        if isinstance(exc, UnauthorizedError):
            headers = {"WWW-Authenticate": "Bearer"}
        return error_response(request, exc.status_code, exc.message, extra=extra, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """自定义HTTP异常处理"""
        message = exc.detail if isinstance(exc.detail, str) else "请求失败"
        return error_response(request, exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求体无法解析时的统一处理"""
        errors = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            errors.setdefault(".".join(loc) or "body", error.get("msg", "格式不正确"))
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "请求参数验证失败",
            extra={"errors": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """全局未捕获异常处理"""
        logger.opt(exception=exc).error(f"Global Exception: {exc}")
        return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "服务器内部错误")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    创建应用并按依赖顺序组装组件：
    数据库引擎 -> 会话工厂 -> 用户仓储 -> 令牌签发器 -> 认证服务
    """
    settings = settings or default_settings
    engine = engine or build_engine(settings.DATABASE_URL, settings)
    session_factory = build_session_factory(engine)

    repository = UserRepository()
    token_issuer = TokenIssuer.from_settings(settings)
    auth_service = AuthService(repository, token_issuer)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Banyan ERP 后端API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.token_issuer = token_issuer
    app.state.auth_service = auth_service

    register_exception_handlers(app)

    # 配置CORS中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS_LIST,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        logger.info(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"Response: {request.method} {request.url.path} {response.status_code} - "
            f"Time: {process_time:.2f}ms"
        )
        return response

    # 注册API路由
    app.include_router(health.router, prefix=settings.API_PREFIX, tags=["系统"])
    app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["认证"])

    @app.on_event("startup")
    def startup_event():
        """应用启动时执行"""
        if settings.INIT_DB_ON_STARTUP:
            init_db(engine)
        logger.info(f"[START] {settings.APP_NAME} v{settings.APP_VERSION} 启动成功")
        logger.info(f"[DOCS] API文档: http://localhost:{settings.SERVER_PORT}/docs")

    @app.on_event("shutdown")
    def shutdown_event():
        """应用关闭时执行"""
        logger.info(f"[STOP] {settings.APP_NAME} 正在关闭...")
        engine.dispose()

    return app


if __name__ == "__main__":
    import uvicorn

    setup_logging(default_settings)
    uvicorn.run(
        create_app(default_settings),
        host=default_settings.SERVER_HOST,
        port=default_settings.SERVER_PORT,
    )
