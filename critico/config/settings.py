# critico/config/settings.py
import os
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    # Postgres
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "critico"
    db_user: str = "critico"
    db_password: str = ""
    db_ssl: bool = False

    # full URL wins over the parts above (tests use sqlite)
    database_url_override: str | None = os.getenv("DATABASE_URL")
    auto_create_schema: bool = False

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    app_prefix: str = ""
    api_prefix: str = "/api"
    public_base_url: str = "http://localhost:5173"

    cors_origins_raw: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    )
    socketio_async_mode: str = "eventlet"

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_access_minutes: int = int(os.getenv("JWT_ACCESS_MINUTES", "60"))
    jwt_issuer: str = os.getenv("JWT_ISSUER", "critico-api")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "critico-front")

    password_iterations: int = int(os.getenv("PASSWORD_ITERATIONS", "600000"))

    conversation_reload_debounce_seconds: float = 0.5

    files_base_path: str = os.getenv("FILES_BASE_PATH", "./_uploads")
    files_public_base_url: str = os.getenv("FILES_PUBLIC_BASE_URL", "http://localhost:5000/files")
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))

    # product and profile pictures only
    allowed_mime_types_raw: str = os.getenv(
        "ALLOWED_MIME_TYPES",
        ",".join(
            [
                "image/png",
                "image/jpeg",
                "image/jpg",
                "image/webp",
                "image/gif",
            ]
        ),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        url = f"postgresql+psycopg2://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"
        if self.db_ssl:
            url += "?sslmode=require"
        return url

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_raw.split(",") if o.strip()]

    @property
    def redeem_base_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/activate"


settings = Settings()
