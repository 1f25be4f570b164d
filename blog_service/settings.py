from typing import Any, Dict

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # === Database ===
    DATABASE_URL: str = "sqlite:///./blog.db"
    DB_ECHO: bool = False

    # === Session cookie ===
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    TOKEN_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session"
    SESSION_MAX_AGE_SEC: int = 60 * 60 * 24 * 7
    COOKIE_SECURE: bool = False

    # === Posts ===
    EXCERPT_LENGTH: int = 150

    # === Misc ===
    INSTANCE_ID: str = "1"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def engine_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"echo": self.DB_ECHO, "future": True}
        if self.is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_pre_ping"] = True
        return kwargs


settings = Settings()
