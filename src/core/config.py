"""Application configuration using Pydantic Settings."""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.entities.environment import Environment

DEFAULT_API_URLS: dict[str, dict[str, str]] = {
    "detections": {
        "dev": "https://detections-backend.dev.s2s.ai",
        "qa": "https://detections-backend.qa.s2s.ai",
        "prod": "https://detections-backend.s2s.ai",
    },
    "integrations": {
        "dev": "https://integrations-management.dev.s2s.ai",
        "qa": "https://integrations-management.qa.s2s.ai",
        "prod": "https://integrations-management.s2s.ai",
    },
    "app": {
        "dev": "https://detections.dev.s2s.ai",
        "qa": "https://detections.qa.s2s.ai",
        "prod": "https://detections.ai",
    },
}


@dataclass(frozen=True)
class EnvironmentEndpoints:
    """Base URLs of the platform services for one environment."""

    environment: Environment
    detections_url: str
    integrations_url: str
    app_url: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Broadcast Automation API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=4501)

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/state.db",
        description="State store connection URL (aiosqlite or asyncpg driver)",
    )

    # Input files
    config_dir: str = Field(
        default="./config",
        description="Directory holding users.json and groups.json",
    )

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    api_urls: dict[str, dict[str, str]] = Field(default_factory=lambda: DEFAULT_API_URLS)

    # Credentials
    credential_mode: str = Field(
        default="static",
        pattern="^(static|password)$",
        description="static: bearer tokens from config; password: OAuth2 password grant",
    )
    admin_token: str = Field(default="")
    admin_email: str = Field(default="")
    admin_password: str = Field(default="")
    user_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="JSON mapping of user id to bearer token",
    )
    user_passwords: dict[str, str] = Field(
        default_factory=dict,
        description="JSON mapping of user id to password (password mode)",
    )

    # Identity provider (password grant)
    auth0_domain: str = Field(default="")
    auth0_client_id: str = Field(default="")
    auth0_client_secret: str = Field(default="")
    auth0_audience: str = Field(default="")

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def endpoints_for(self, environment: Environment) -> EnvironmentEndpoints:
        """Resolve the service base URLs for an environment."""
        env = Environment(environment)
        return EnvironmentEndpoints(
            environment=env,
            detections_url=self.api_urls["detections"][env.value],
            integrations_url=self.api_urls["integrations"][env.value],
            app_url=self.api_urls["app"][env.value],
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_environment_settings(environment: Environment) -> Settings:
    """Load settings with the environment-specific ``.env.<env>`` file layered on top."""
    env = Environment(environment)
    return Settings(_env_file=(".env", f".env.{env.value}"))  # type: ignore[call-arg]


settings = get_settings()
