"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
PositiveInt = Annotated[int, Field(gt=0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    user_api_base_url: HttpUrl = Field(
        default="https://jsonplaceholder.typicode.com/users",
        validation_alias="USER_API_BASE_URL",
    )
    user_api_token: NonEmptyStr | None = Field(default=None, validation_alias="USER_API_TOKEN")
    http_timeout_seconds: NonNegativeFloat = Field(
        default=30.0,
        validation_alias="HTTP_TIMEOUT_SECONDS",
    )
    default_page_size: PositiveInt = Field(default=10, validation_alias="DEFAULT_PAGE_SIZE")
    transient_message_seconds: NonNegativeFloat = Field(
        default=3.0,
        validation_alias="TRANSIENT_MESSAGE_SECONDS",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
