from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    MOVIESDRIVE_URL: Optional[str] = "https://moviesdrive.online"
    USER_AGENT: Optional[str] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) "
        "Gecko/20100101 Firefox/121.0"
    )
    HTTP_PROXY_URL: Optional[str] = None
    HTTP_CLIENT_TIMEOUT_TOTAL: Optional[int] = 30
    HTTP_CLIENT_LIMIT: Optional[int] = 100
    HTTP_CLIENT_LIMIT_PER_HOST: Optional[int] = 20
    HTTP_CLIENT_TTL_DNS_CACHE: Optional[int] = 300
    HTTP_CLIENT_KEEPALIVE_TIMEOUT: Optional[int] = 15
    SEARCH_MAX_PAGES: Optional[int] = 3
    EXTRACTOR_MAX_HOPS: Optional[int] = 5
    RESOLVE_TIMEOUT: Optional[int] = 60
    LOG_LEVEL: Optional[str] = "INFO"

    @field_validator("MOVIESDRIVE_URL")
    def remove_trailing_slash(cls, v):
        if v and v.endswith("/"):
            return v[:-1]
        return v

    @field_validator("HTTP_PROXY_URL")
    def set_proxy_url(cls, v):
        if v is not None and v.lower() in ("", "none"):
            return None
        return v

    @field_validator("RESOLVE_TIMEOUT")
    def disable_resolve_timeout(cls, v):
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("LOG_LEVEL")
    def normalize_log_level(cls, v):
        return v.upper() if v else "INFO"


settings = AppSettings()
