from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration via environment variables.

    WEBHOOK_SECRET may be left empty, which disables webhook authentication.
    GLOBAL_CONFIG_FILE enables the process-wide fallback configuration used
    when a project has no config file of its own.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # GitLab configuration
    GITLAB_TOKEN: str = Field(..., description="GitLab personal, project or group access token")
    GITLAB_BASEURL: str = Field(
        default="https://gitlab.com/",
        description="Base URL of the GitLab instance, e.g. 'https://gitlab.example.com/'"
    )

    # Webhook security
    WEBHOOK_SECRET: str = Field(
        default="",
        description="Shared secret compared against X-Gitlab-Token; empty disables the check"
    )

    # Rule configuration
    CONFIG_FILE: str = Field(
        default=".scm-engine.yml",
        description="Path of the config file inside each project"
    )
    GLOBAL_CONFIG_FILE: str = Field(
        default="",
        description="Local path of the fallback config used when a project has none"
    )

    # HTTP client
    HTTP_TIMEOUT: float = Field(default=10.0, description="Timeout in seconds for GitLab API calls")

    # Server
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    HOST: str = Field(default="0.0.0.0", description="HTTP server bind address")
    PORT: int = Field(default=3000, description="HTTP server port")

    @field_validator("GITLAB_BASEURL", mode="before")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("GITLAB_BASEURL must not be empty")
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid GITLAB_BASEURL: {v}. Expected an http(s) URL")
        return v

    def api_url(self) -> str:
        """Returns the GitLab REST API v4 root."""
        return self.GITLAB_BASEURL.rstrip("/") + "/api/v4"

    def auth_enabled(self) -> bool:
        """Returns whether inbound webhooks must carry the shared secret."""
        return bool(self.WEBHOOK_SECRET)


def get_settings() -> Settings:
    """Factory function to get settings instance.

    This allows for lazy initialization and easier testing.
    """
    return Settings()
