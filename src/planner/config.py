"""Planner configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class PlannerConfig(BaseSettings):
    """Planner configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Event backend
    eventhub_api_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the event management API",
    )
    eventhub_token: str = Field(
        default="",
        description="Bearer token sent with every API request",
    )
    eventhub_organization: str = Field(
        default="",
        description="Organization UUID sent as the X-Organization header",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
    )

    # Paths
    state_dir: str = Field(
        default="data/import_mappings",
        description="Directory holding persisted import mappings per schedule",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: PlannerConfig | None = None


def get_config() -> PlannerConfig:
    """Get the planner configuration singleton.

    Returns:
        PlannerConfig: Planner configuration instance
    """
    global _config
    if _config is None:
        _config = PlannerConfig()
    return _config
