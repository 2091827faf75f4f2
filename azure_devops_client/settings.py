"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import AzureDevOpsConnection
from .ratelimit import DEFAULT_BURST, RateLimiterRegistry


class Settings(BaseSettings):
    """Settings for the Azure DevOps connection."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    azure_devops_url: str = "https://dev.azure.com"
    azure_devops_username: str = ""
    azure_devops_token: str | None = None
    # JSON lists in the environment, e.g. AZURE_DEVOPS_PROJECTS='["org/proj"]'
    azure_devops_projects: list[str] = []
    azure_devops_orgs: list[str] = []
    # None means no self-imposed limit
    azure_devops_requests_per_second: float | None = Field(default=None, gt=0)
    azure_devops_burst: int = Field(default=DEFAULT_BURST, ge=1)

    def connection(self) -> AzureDevOpsConnection:
        """Build the connection config for the configured code host."""
        if not self.azure_devops_token:
            raise ConfigurationError("AZURE_DEVOPS_TOKEN is not set")
        return AzureDevOpsConnection(
            url=self.azure_devops_url,
            username=self.azure_devops_username,
            token=self.azure_devops_token,
            projects=tuple(self.azure_devops_projects),
            orgs=tuple(self.azure_devops_orgs),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_registry() -> RateLimiterRegistry:
    """Get the process-wide rate limiter registry, configured from settings."""
    settings = get_settings()
    rate = settings.azure_devops_requests_per_second
    return RateLimiterRegistry(
        default_rate=rate if rate is not None else float("inf"),
        default_burst=settings.azure_devops_burst,
    )
