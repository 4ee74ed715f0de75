# app/core/config.py
from dotenv import load_dotenv
load_dotenv(".env")
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, HttpUrl, computed_field
from typing import Optional

class Settings(BaseSettings):
    # model_config 会自动加载 .env 文件
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # 应用配置 (会自动转换类型)
    APP_ENV: str = "production"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "chaitra"

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # 用于加密存储第三方 API Key
    CREDENTIAL_ENCRYPTION_KEY: Optional[str] = None

    # --- Outbound calls ---
    VALIDATION_TIMEOUT_SECONDS: float = Field(10.0, gt=0, description="Upper bound for a single key probe.")
    PUBLISH_TIMEOUT_SECONDS: float = Field(45.0, gt=0, description="Upper bound for a single platform upload.")

    # --- Billing ---
    CONTENT_UPLOAD_COST: int = Field(2, gt=0, description="Credits debited per content upload request.")

    # --- Publishing (Upload-Post) ---
    UPLOAD_POST_API_KEY: Optional[str] = None
    UPLOAD_POST_API_URL: HttpUrl = Field(
        "https://api.uploadpost.com/v1",
        description="Base URL of the multi-platform upload service."
    )

    # --- Probe defaults ---
    GEMINI_MODEL: str = "gemini-1.5-pro-latest"
    DEFAULT_SENDER_EMAIL: str = "noreply@chaitra.ai"
    PROBE_RECIPIENT_EMAIL: str = "test@chaitra.ai"

    # 平台级 Key，仅用于 /status 报告服务是否已配置
    GEMINI_API_KEY: Optional[str] = None
    UNDETECTABLE_API_KEY: Optional[str] = None
    SAPLING_API_KEY: Optional[str] = None
    RESEND_API_KEY: Optional[str] = None
    APIFY_API_KEY: Optional[str] = None
    PHANTOMBUSTER_API_KEY: Optional[str] = None
    LANGUAGETOOL_API_KEY: Optional[str] = None

settings = Settings()
