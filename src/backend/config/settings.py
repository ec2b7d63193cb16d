"""Centralized application settings loaded from environment variables.

All configuration is defined once here. Other modules should import
``get_settings()`` rather than calling ``os.getenv()`` directly.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables.

    Field names are **lowercased** versions of the env-var names.
    ``pydantic-settings`` maps them automatically (case-insensitive).

    Example::

        settings = Settings()  # reads .env + real env
        key = settings.openai_api_key
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- LLM providers -----------------------------------------------------

    llm_provider: str | None = None
    """Pin a provider ('openai', 'anthropic', 'azure_ai'). None → preference order."""

    openai_api_key: str | None = None
    """OpenAI API key. Preferred provider when present."""

    openai_model: str = "gpt-4-turbo-preview"
    """Model used for SQL generation with OpenAI."""

    openai_narration_model: str = "gpt-3.5-turbo"
    """Smaller model used to narrate query results with OpenAI."""

    anthropic_api_key: str | None = None
    """Anthropic API key. Used when no OpenAI key is configured."""

    anthropic_model: str = "claude-3-sonnet-20240229"
    """Model used for SQL generation with Anthropic."""

    anthropic_narration_model: str = "claude-3-haiku-20240307"
    """Smaller model used to narrate query results with Anthropic."""

    azure_ai_project_endpoint: str = ""
    """Foundry project endpoint URL. Last provider in the preference order."""

    azure_ai_model_deployment_name: str = "gpt-4o"
    """Model deployment used for SQL generation with Azure AI Foundry."""

    azure_ai_narration_model: str | None = None
    """Model override for narration. Falls back to the deployment above."""

    azure_client_id: str | None = None
    """Managed-identity client ID (None → system-assigned)."""

    model_timeout_seconds: float = 30.0
    """Upper bound on a single model call before it counts as a failure."""

    # -- Database ----------------------------------------------------------

    database_server: str = ""
    """Postgres hostname."""

    database_port: int = 5432
    """Postgres port."""

    database_name: str = "postgres"
    """Target database name."""

    database_user: str = ""
    """Database role used for catalog reads and query execution."""

    database_password: str = ""
    """Password for ``database_user``."""

    database_schema: str = "public"
    """Schema whose tables are exposed to the assistant."""

    database_odbc_driver: str = "PostgreSQL Unicode"
    """ODBC driver name registered with unixODBC."""

    # -- Thresholds / Tuning -----------------------------------------------

    conversational_confidence_threshold: float = 0.9
    """Minimum confidence to accept a SQL-less reply as a conversational answer."""

    execute_confidence_threshold: float = 0.3
    """Minimum confidence to execute a generated query."""

    default_query_limit: int = 100
    """LIMIT appended to generated queries that do not carry one."""

    enable_result_narration: bool = True
    """Issue a second, smaller model call to narrate query results."""

    # -- Operational -------------------------------------------------------

    max_history_messages: int = 20
    """Messages kept per session; older ones are dropped first."""

    max_session_cache_size: int = 1000
    """Upper bound on sessions held by the in-memory history store."""

    cors_allow_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    """Origins allowed by the CORS middleware."""

    log_level: str = "INFO"
    """Root log level."""


def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Uses ``lru_cache`` semantics via a module-level singleton so the
    ``.env`` file is read at most once per process.

    Returns:
        The global ``Settings`` object.
    """
    return _settings


_settings = Settings()
