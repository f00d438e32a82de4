"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from zoo_auth.infrastructure.security.password_hasher import (
    DEFAULT_COST_FACTOR,
    MAX_COST_FACTOR,
    MIN_COST_FACTOR,
)

NonEmptyStr = Annotated[str, Field(min_length=1)]
PortInt = Annotated[int, Field(gt=0, lt=65536)]
CostFactorInt = Annotated[int, Field(ge=MIN_COST_FACTOR, le=MAX_COST_FACTOR)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    bcrypt_cost_factor: CostFactorInt = Field(
        default=DEFAULT_COST_FACTOR,
        validation_alias="BCRYPT_COST_FACTOR",
    )
    dry_run: bool = Field(default=False, validation_alias="DRY_RUN")
    api_host: NonEmptyStr = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: PortInt = Field(default=8000, validation_alias="API_PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
