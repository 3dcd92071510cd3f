from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection settings, read from ``TYPESTORE_*`` environment variables.

    Keyword arguments take precedence over the environment.
    """

    bucket: str
    endpoint: str | None = None
    region: str = "us-east-1"
    access_key_id: str | None = None
    secret_access_key: str | None = None
    addressing_style: Literal["path", "virtual", "auto"] = "path"
    max_concurrency: int = 16
    timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="TYPESTORE_",
        case_sensitive=False,
        extra="ignore",
    )
