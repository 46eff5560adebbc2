"""
Configuration management for Notion Carousel
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application Settings
    app_name: str = Field(default="Notion Carousel", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="production", description="Environment")

    # Notion
    notion_token: Optional[str] = Field(default=None, description="Notion API integration token")
    notion_database_id: Optional[str] = Field(default=None, description="Default Notion database ID or URL")
    notion_version: str = Field(default="2022-06-28", description="Notion-Version header for raw requests")
    notion_api_base_url: str = Field(default="https://api.notion.com/v1", description="Notion REST base URL")
    request_timeout_seconds: float = Field(default=30.0, description="Timeout for raw Notion requests")

    # Debugging
    debug_notion: Optional[str] = Field(default=None, description="Enable Notion debug traces (1/true/on)")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Embedding
    frame_ancestors: str = Field(
        default="'self' https: https://www.notion.so https://notion.so https://*.notion.so https://*.notion.site",
        description="Content-Security-Policy frame-ancestors sources"
    )

    @field_validator("notion_token", "notion_database_id")
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank environment values as unset"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_notion_debug_enabled(self) -> bool:
        """Debug traces are on when explicitly flagged or outside production"""
        flag = (self.debug_notion or "").strip().lower()
        return flag in ("1", "true", "on") or not self.is_production

    def validate_required_for_fetch(self):
        """Validate that required fields are available for slide fetching"""
        required_fields = {
            'notion_token': self.notion_token,
            'notion_database_id': self.notion_database_id,
        }

        missing = [field for field, value in required_fields.items() if not value]
        if missing:
            return False, f"Missing required configuration: {', '.join(missing)}"

        return True, "All required configuration present"


# Global config instance
config = Config()
