"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # JIRA server settings
    JIRA_URL: str | None = None

    # Basic authentication settings
    JIRA_USERNAME: str | None = None
    JIRA_API_TOKEN: str | None = None

    # Personal access token settings
    JIRA_PAT_TOKEN: str | None = None

    # Sync settings
    JIRA_PROJECTS: str | None = None
    JIRA_OUTLINE_DIR: Path = Path("outline")
    JIRA_CONFIG_FILE: Path | None = None


settings = Settings()
