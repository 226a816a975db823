from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TEXT_MODEL = "@cf/meta/llama-4-scout-17b-16e-instruct"
DEFAULT_IMAGE_MODEL = "@cf/black-forest-labs/flux-1-schnell"


class AppSettings(BaseSettings):
    """Application configuration loaded from environment or .env."""

    app_name: str = Field(default="ByteSpark Blog")
    app_env: str = Field(default="dev", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS"
    )
    site_base_url: str = Field(default="http://localhost:3000", alias="SITE_BASE_URL")

    jwt_secret_key: Optional[SecretStr] = Field(default=None, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_ttl: int = Field(default=60 * 60 * 24, alias="ACCESS_TOKEN_TTL")
    admin_user_id: Optional[str] = Field(default=None, alias="ADMIN_USER_ID")

    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    cloudflare_account_id: Optional[str] = Field(default=None, alias="CLOUDFLARE_ACCOUNT_ID")
    cloudflare_api_token: Optional[SecretStr] = Field(default=None, alias="CLOUDFLARE_API_TOKEN")
    workers_ai_text_model: str = Field(default=DEFAULT_TEXT_MODEL, alias="WORKERS_AI_TEXT_MODEL")
    workers_ai_image_model: str = Field(default=DEFAULT_IMAGE_MODEL, alias="WORKERS_AI_IMAGE_MODEL")
    workers_ai_translation_model: str = Field(
        default=DEFAULT_TEXT_MODEL, alias="WORKERS_AI_TRANSLATION_MODEL"
    )
    workers_ai_timeout: float = Field(default=120.0, alias="WORKERS_AI_TIMEOUT")
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")

    r2_endpoint_url: Optional[str] = Field(default=None, alias="R2_ENDPOINT_URL")
    r2_bucket: Optional[str] = Field(default=None, alias="R2_BUCKET")
    r2_access_key_id: Optional[SecretStr] = Field(default=None, alias="R2_ACCESS_KEY_ID")
    r2_secret_access_key: Optional[SecretStr] = Field(default=None, alias="R2_SECRET_ACCESS_KEY")
    r2_public_domain: Optional[str] = Field(default=None, alias="R2_PUBLIC_DOMAIN")
    r2_image_prefix: str = Field(default="images/", alias="R2_IMAGE_PREFIX")

    messages_dir: Path = Field(default=Path("messages"), alias="MESSAGES_DIR")
    supported_locales: list[str] = Field(
        default_factory=lambda: ["en", "zh", "ja", "ko", "es", "fr", "de", "ar"],
        alias="SUPPORTED_LOCALES",
    )
    no_translate_keys: list[str] = Field(
        default_factory=lambda: ["siteInfo.brandName"],
        alias="NO_TRANSLATE_KEYS",
    )
    translation_batch_size: int = Field(default=5, ge=1, alias="TRANSLATION_BATCH_SIZE")
    translation_batch_delay: float = Field(default=3.0, ge=0, alias="TRANSLATION_BATCH_DELAY")
    article_batch_size: int = Field(default=8, ge=1, alias="ARTICLE_BATCH_SIZE")
    blog_page_size: int = Field(default=18, ge=1, alias="BLOG_PAGE_SIZE")
    admin_page_size: int = Field(default=10, ge=1, alias="ADMIN_PAGE_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def r2_endpoint(self) -> str | None:
        """Explicit endpoint, or the account-scoped R2 endpoint when an account is set."""
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        if self.cloudflare_account_id:
            return f"https://{self.cloudflare_account_id}.r2.cloudflarestorage.com"
        return None


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings."""
    return AppSettings()  # type: ignore[call-arg]
