from pydantic_settings import BaseSettings
from functools import lru_cache


API_BASE_PATH = "/api/bot"


class Settings(BaseSettings):
    # Telegram
    bot_token: str = ""

    # Bryx CRM
    crm_api_url: str = ""
    crm_api_timeout: float = 30.0

    # Comma-separated usernames. Reported at startup only: access is decided
    # by the CRM user directory (GET /users).
    allowed_users: str = ""
    users_refresh_interval: int = 300  # seconds

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def allowed_users_list(self) -> list[str]:
        return [u.strip() for u in self.allowed_users.split(",") if u.strip()]

    @property
    def api_base_url(self) -> str:
        """CRM URL with the bot API prefix, e.g. https://crm.example/api/bot"""
        url = self.crm_api_url.rstrip("/")
        if not url.endswith(API_BASE_PATH):
            url += API_BASE_PATH
        return url


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def report_settings(settings: Settings, logger) -> None:
    """Log which settings were picked up. Missing values are not fatal here."""
    if settings.bot_token:
        logger.info("BOT_TOKEN loaded")
    else:
        logger.warning("BOT_TOKEN not found in environment variables")

    if settings.crm_api_url:
        logger.info(f"CRM_API_URL loaded: {settings.crm_api_url}")
    else:
        logger.warning("CRM_API_URL not found in environment variables")

    if settings.allowed_users_list:
        logger.info(f"ALLOWED_USERS loaded: {', '.join(settings.allowed_users_list)}")
    else:
        logger.warning("ALLOWED_USERS not found in environment variables")
