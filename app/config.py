"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── MySQL (any SQLAlchemy async URL works via DATABASE_URL) ────────────
    database_url: Optional[str] = None
    mysql_host: str = "mysql"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_database: str = "blog"

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
        )

    # ── Auth ───────────────────────────────────────────────────────────────
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30

    # ── Notifications ──────────────────────────────────────────────────────
    webhook_url: Optional[str] = None
    frontend_url: str = "http://localhost:5173"

    # ── S3-compatible object storage ───────────────────────────────────────
    s3_endpoint: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_folder: str = ""
    s3_access_host: Optional[str] = None     # public URL prefix; defaults to endpoint
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    s3_region: str = "auto"

    # ── Friend health crontab ──────────────────────────────────────────────
    friend_check_timeout: float = 10.0
    friend_check_job: str = "friend-check"
    pushgateway_url: Optional[str] = None    # e.g. http://pushgateway:9091

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "blog-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
