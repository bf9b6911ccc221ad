import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets import fetch_vault_secret

load_dotenv(".env")

INSECURE_MARKERS = ("postgres:postgres@", "changeme", "change-me", "replace-me", "root@", "verysecret")


def _fallback_db_url() -> str | None:
    return os.getenv("DATABASE_URL") or None


class Settings(BaseSettings):
    app_name: str = "Library API"
    version: str = "1.0.0"
    database_url: str | None = Field(default_factory=_fallback_db_url)
    api_key: str | None = None
    log_level: str = "INFO"
    otel_enabled: bool = False
    strict_security: bool = False
    vault_addr: str | None = None
    vault_token: str | None = None
    vault_kv_mount: str = "kv"
    vault_secret_path: str = "library-api/config"

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def _looks_insecure(value: str | None) -> bool:
    return bool(value) and any(marker in value.lower() for marker in INSECURE_MARKERS)


def get_settings() -> Settings:
    settings = Settings()
    if settings.vault_addr and settings.vault_token:
        secret = fetch_vault_secret(
            addr=settings.vault_addr,
            token=settings.vault_token,
            mount=settings.vault_kv_mount,
            path=settings.vault_secret_path,
        )
        if secret.get("database_url"):
            settings.database_url = secret["database_url"]
        if secret.get("api_key"):
            settings.api_key = secret["api_key"]

    if not settings.database_url:
        raise RuntimeError("No database connection string configured (APP_DATABASE_URL)")
    if not settings.api_key:
        raise RuntimeError("No API key configured (APP_API_KEY)")

    if settings.strict_security:
        if _looks_insecure(settings.database_url):
            raise RuntimeError("Insecure database credentials detected")
        if _looks_insecure(settings.api_key):
            raise RuntimeError("Insecure API key detected")
        if settings.vault_token and settings.vault_token.lower() == "root":
            raise RuntimeError("Insecure Vault token detected")
    return settings
