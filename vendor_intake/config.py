"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    environment: str = "development"
    cors_origins: list[str] = ["*"]
    display_timezone: str = "America/Los_Angeles"

    # Monday.com board
    monday_api_url: str = "https://api.monday.com/v2"
    monday_api_key: str = ""
    monday_api_version: str = "2024-01"
    monday_board_id: str = ""

    # Rate limiting (applies to /api/*)
    rate_limit_window_ms: int = 15 * 60 * 1000
    rate_limit_max_requests: int = 100
    rate_limit_storage_uri: str = "memory://"

    # Attachments
    max_file_size_mb: int = 10
    allowed_file_types: list[str] = ["pdf", "jpg", "jpeg", "png"]

    # Duplicate handling
    enable_duplicate_check: bool = True
    update_existing_vendors: bool = True  # False rejects duplicates with 409

    # Email (both flags must be on)
    enable_auto_email: bool = False
    send_emails: bool = False
    resend_api_key: str = ""
    email_from: str = "BuildCore Vendors <vendors@example.com>"
    team_email: str = ""

    # Google Drive archival
    # Inline JSON wins over the key file when both are set
    google_service_account_key: str = ""
    google_service_account_key_file: str = ""
    google_shared_drive_id: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def drive_configured(self) -> bool:
        return bool(self.google_service_account_key or self.google_service_account_key_file)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
