# app/backend/core/config.py
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 기본 앱 설정
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # 저장소 선택: "sql" (DB) | "local" (JSON key-value 파일)
    storage_backend: str = Field("sql", alias="STORAGE_BACKEND")

    # DB
    database_url: str = Field("sqlite:///./taskboard.db", alias="DATABASE_URL")
    auto_create_tables: bool = Field(True, alias="AUTO_CREATE_TABLES")

    # Local key-value store
    local_store_path: str = Field("./taskboard-store.json", alias="LOCAL_STORE_PATH")
    local_store_namespace: str = Field("taskboard", alias="LOCAL_STORE_NAMESPACE")

    # JWT
    jwt_secret_key: str = Field("taskboard-secret-key", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(720, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # CORS
    cors_allow_origins: str = Field(
        "http://localhost:3000,http://localhost:5173", alias="CORS_ALLOW_ORIGINS"
    )

    # Client: "remote" (REST API) | "local" (in-process stores)
    client_mode: str = Field("remote", alias="CLIENT_MODE")
    api_url: str = Field("http://localhost:10000", alias="API_URL")
    client_storage_path: str = Field("./taskboard-client.json", alias="CLIENT_STORAGE_PATH")

    @field_validator("storage_backend", "client_mode")
    @classmethod
    def _normalize_choice(cls, v: str) -> str:
        # "SQL", " local " 등도 허용
        return v.strip().lower()

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
