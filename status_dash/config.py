import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Status Dash"
    refresh_interval_seconds: int = Field(
        10, description="How often the status page reloads its metrics."
    )
    database_url: str = Field(
        "sqlite:///./data/status_dash.db", description="SQLAlchemy database URL."
    )
    sqlalchemy_echo: bool = Field(False, description="Enable SQL echo logging.")
    server_timeout_seconds: int = Field(
        300, description="Heartbeat age after which a server no longer counts as active."
    )
    log_level: str = Field("INFO", description="Root log level.")
    host: str = Field("127.0.0.1", description="Interface the HTTP server binds to.")
    port: int = Field(8000, description="Port the HTTP server listens on.")

    @field_validator("database_url")
    def ensure_sqlite_directory(cls, value: str) -> str:
        if value.startswith("sqlite:///") and value != "sqlite:///:memory:":
            path = Path(value.replace("sqlite:///", "", 1))
            path.parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    def normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level {value!r}")
        return value

    class Config:
        env_prefix = "STATUS_DASH_"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
