"""
Annotation Gateway - Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a `settings` object.
Who:   Passed into create_app() and from there into GitHubContentClient.
When:  Loaded once at module import time; validated during app startup.

Required values:
    GITHUB_TOKEN   Access token with contents read/write on the repository
    GITHUB_REPO    Repository identifier in "owner/repo" form

Missing required values do not stop the process by default. The lifespan
logs the problem and the server keeps running; every remote call then fails
with ConfigurationError. Set STRICT_CONFIG=true to refuse startup instead.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Placeholder shipped in sample .env files; treated the same as "unset"
TOKEN_PLACEHOLDER = "your_github_token_here"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings except the GitHub credentials have working defaults.
    Attributes are grouped by concern.
    """

    # ── GitHub ────────────────────────────────────────────────────────────
    # What: Personal access token sent as "Authorization: token <value>"
    # Required: YES (remote calls fail with ConfigurationError without it)
    github_token: str = Field(
        default="",
        description="GitHub access token with repository contents permission",
    )

    # What: Target repository, e.g. "acme/ocr-annotation-data"
    github_repo: str = Field(
        default="",
        description="Repository holding images/, Old_ocr/ and New_ocr/ (owner/repo)",
    )

    github_api_url: str = Field(default="https://api.github.com")

    # What: Total timeout applied to every outbound GitHub request, in seconds
    github_timeout: float = Field(default=10.0, ge=1.0, le=120.0)

    github_user_agent: str = Field(default="OCR-Annotation-Tool")

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # What: Directory served for every path that is not an API route
    # Default "." serves the process working directory (front-end assets)
    static_dir: str = Field(default=".")

    # Format: Comma-separated URLs (see cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # What: Refuse to start when GITHUB_TOKEN / GITHUB_REPO are missing
    # Default False keeps the server up in a degraded state
    strict_config: bool = Field(default=False)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # GITHUB_TOKEN and github_token both work
        "extra": "ignore",
    }

    @property
    def has_token(self) -> bool:
        return bool(self.github_token) and self.github_token != TOKEN_PLACEHOLDER

    @property
    def has_valid_repo(self) -> bool:
        owner, sep, name = self.github_repo.strip().partition("/")
        return bool(sep and owner and name and "/" not in name)

    @property
    def is_configured(self) -> bool:
        """True when remote calls can be attempted at all."""
        return self.has_token and self.has_valid_repo

    @property
    def repo_api_url(self) -> str:
        """Base URL of the repository resource, e.g. https://api.github.com/repos/o/r"""
        return f"{self.github_api_url.rstrip('/')}/repos/{self.github_repo.strip()}"

    def validate_required(self) -> None:
        """
        What:  Validates that the GitHub credentials are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them all.
        """
        errors = []
        if not self.has_token:
            errors.append(
                "GITHUB_TOKEN is not set. "
                "Create a token with repository contents read/write access."
            )
        if not self.github_repo.strip():
            errors.append("GITHUB_REPO is not set. Expected the form 'owner/repo'.")
        elif not self.has_valid_repo:
            errors.append(
                f"GITHUB_REPO '{self.github_repo}' is invalid. Expected the form 'owner/repo'."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Default instance used by the module-level app in main.py
settings = Settings()
