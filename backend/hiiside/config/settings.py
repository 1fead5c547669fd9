"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "HiiSide"
    app_version: str = "1.0.0"
    environment: str = "development"  # "production" enables Secure cookies
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8787

    # Site metadata
    site_name: str = "HiiSide"
    site_url: str = "https://hillside.micorp.pro"
    default_og_image: Optional[str] = None  # defaults to the light-mode logo under site_url
    user_agent: str = "HiiSideBot/1.0 (+https://hillside.micorp.pro)"

    # Sessions
    cookie_domain: str = ""

    # CORS, comma separated
    chat_allowed_origins: str = "http://localhost:8080,http://127.0.0.1:8080"

    # Static content
    dist_dir: str = "./dist"
    public_dir: str = "./public"
    index_template_path: str = "./index.html"  # used when dist/index.html is missing
    cache_index_template: bool = True

    # Upstream services
    bsky_service: str = "https://bsky.social"
    public_api: str = "https://public.api.bsky.app"
    chat_service_did: str = "did:web:api.bsky.chat"
    chat_service_type: str = "bsky_chat"
    emoji_api_origin: str = "https://www.emoji.family"
    upstream_timeout_seconds: float = 30.0

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/hiiside.log"
    log_file_enabled: bool = False
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log chat/emoji API requests and responses

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def site_base_url(self) -> str:
        """Site URL without a trailing slash."""
        return self.site_url.rstrip("/")

    @property
    def default_og_image_url(self) -> str:
        if self.default_og_image:
            return self.default_og_image
        return f"{self.site_base_url}/logo/light-mode-logo.png"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.chat_allowed_origins.split(",") if origin.strip()]


settings = Settings()
