"""
Application configuration management.
"""

from pydantic_settings import BaseSettings
from typing import Optional

from sonar_gitlab_webhook.models.routing import GitLabCredentials


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitLab (not validated up front, a bad value surfaces as a rejected request)
    gitlab_url: str = ""
    gitlab_token: str = ""

    # SonarQube properties carrying the routing identifiers
    property_prefix: str = "sonar.analysis."

    # Webhook
    webhook_secret: Optional[str] = None

    # Application
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    class Config:
        env_file = ".env"
        case_sensitive = False

    def gitlab_credentials(self) -> GitLabCredentials:
        """Build the credentials handed to the comment publisher."""
        return GitLabCredentials(base_url=self.gitlab_url, token=self.gitlab_token)


# Global settings instance
settings = Settings()
