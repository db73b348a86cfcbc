"""Configuration for the OpenAPI executor."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Set

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Credentials


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OPENAPI_EXECUTOR_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    service_name: str = Field(default="openapi-executor")

    spec_url: str = Field(default="")
    base_url_override: Optional[str] = Field(default=None)

    auth_type: str = Field(default="none")
    api_key: Optional[str] = Field(default=None)
    api_key_location: str = Field(default="header")
    api_key_name: Optional[str] = Field(default=None)
    bearer_token: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    http_timeout_seconds: float = Field(default=30)
    verify_ssl: bool = Field(default=True)

    transport: str = Field(default="stdio")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    auth_token: Optional[str] = Field(default=None)

    operation_allowlist: Optional[str] = Field(default=None)

    log_level: str = Field(default="INFO")

    def credentials(self) -> Credentials:
        return Credentials(
            auth_type=self.auth_type,
            api_key=self.api_key,
            api_key_location=self.api_key_location,
            api_key_name=self.api_key_name,
            bearer_token=self.bearer_token,
            username=self.username,
            password=self.password,
            spec_url=self.spec_url,
            base_url_override=self.base_url_override,
        )

    def operation_ids(self) -> Set[str]:
        if not self.operation_allowlist:
            return set()
        return {item.strip() for item in self.operation_allowlist.split(",") if item.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
