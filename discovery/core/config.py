from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: str = "logs"
    SLACK_WEBHOOK_URL: str | None = None

    # Curated registry (CurseForge)
    CURSEFORGE_API_KEY: str | None = None
    CURSEFORGE_BASE_URL: str = "https://api.curseforge.com/v1"
    CURSEFORGE_GAME_ID: int = 432  # Minecraft

    # Community registry (Modrinth)
    MODRINTH_BASE_URL: str = "https://api.modrinth.com/v2"

    # HTTP
    USER_AGENT: str = "federated-discovery/0.1.0"
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Query cache
    SEARCH_CACHE_TTL_SECONDS: int = 5 * 60
    VERSIONS_CACHE_TTL_SECONDS: int = 5 * 60
    DETAIL_CACHE_TTL_SECONDS: int = 10 * 60
    GAME_VERSIONS_CACHE_TTL_SECONDS: int = 30 * 60
    LOADER_VERSIONS_CACHE_TTL_SECONDS: int = 30 * 60
    DEGRADED_CACHE_TTL_SECONDS: int = 30  # search results missing a source
    CACHE_MAX_ENTRIES: int = 256

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def effective_log_level(self) -> str:
        """Return appropriate log level based on environment."""
        if self.is_production:
            # In production, minimum INFO level (ignore DEBUG)
            return self.LOG_LEVEL if self.LOG_LEVEL.upper() != "DEBUG" else "INFO"
        return self.LOG_LEVEL

    @property
    def curseforge_enabled(self) -> bool:
        """The curated registry rejects every request without an API key."""
        return bool(self.CURSEFORGE_API_KEY)


settings = Settings()
