"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Documented fallback for local development and tests only. Production and
# staging refuse to start with it.
DEVELOPMENT_SECRET_KEY = "planbee-dev-secret"

STRICT_ENVIRONMENTS = frozenset({"production", "staging"})


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./planbee.db", alias="url")
    echo: bool = False


class SecuritySettings(BaseModel):
    secret_key: Optional[str] = Field(default=None, min_length=8)
    algorithm: str = "HS256"
    access_token_expire_days: int = 7


class CorsSettings(BaseModel):
    origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    allow_credentials: bool = True


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Plan Bee API"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    cors: CorsSettings = CorsSettings()
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _require_secret_outside_development(self) -> "Settings":
        secret = self.security.secret_key
        if self.environment in STRICT_ENVIRONMENTS and (not secret or secret == DEVELOPMENT_SECRET_KEY):
            raise ValueError(
                f"SECURITY__SECRET_KEY must be set to a private value when ENVIRONMENT={self.environment}"
            )
        return self

    @property
    def uses_fallback_secret(self) -> bool:
        return not self.security.secret_key

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key or DEVELOPMENT_SECRET_KEY

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_days(self) -> int:
        return self.security.access_token_expire_days


@lru_cache()
def get_settings() -> Settings:
    return Settings()
