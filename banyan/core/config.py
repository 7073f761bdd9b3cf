"""
系统配置管理模块
使用 pydantic-settings 从环境变量加载配置
"""
from typing import List
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """系统配置类"""

    # ==================== 应用配置 ====================
    APP_NAME: str = "Banyan ERP API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    API_PREFIX: str = "/api"

    # ==================== 服务配置 ====================
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3001

    # ==================== 数据库配置 ====================
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "123456"
    DB_NAME: str = "banyan"
    # 设置后直接使用该URL（例如 sqlite:///./banyan.db），忽略上面的MySQL配置
    DATABASE_URL_OVERRIDE: str = ""

    # 数据库连接池配置
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 3600

    @property
    def DATABASE_URL(self) -> str:
        """构建数据库连接URL"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        # 对密码进行URL编码，处理特殊字符（如@、#等）
        encoded_password = quote_plus(self.DB_PASSWORD)
        return f"mysql+pymysql://{self.DB_USER}:{encoded_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"

    # ==================== 安全配置 ====================
    # 访问令牌与刷新令牌使用不同的密钥
    JWT_SECRET: str = "banyan-jwt-secret-key"
    JWT_EXPIRES_IN: str = "15m"
    JWT_REFRESH_SECRET: str = "banyan-refresh-secret-key"
    JWT_REFRESH_EXPIRES_IN: str = "7d"
    JWT_ALGORITHM: str = "HS256"

    # bcrypt 工作因子
    BCRYPT_ROUNDS: int = 10

    # ==================== CORS配置 ====================
    CORS_ORIGINS: str = "http://localhost:3000"
    CORS_ALLOW_CREDENTIALS: bool = True

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """解析CORS origins为列表"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # ==================== 初始化配置 ====================
    INIT_DB_ON_STARTUP: bool = True

    # ==================== 客户端配置 ====================
    API_BASE_URL: str = "http://localhost:3001/api"
    CLIENT_TIMEOUT: float = 10.0
    SESSION_FILE: str = ".banyan/auth-storage.json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# 创建全局配置实例
settings = Settings()
