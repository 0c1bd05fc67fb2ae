"""Application configuration with environment variable loading.

Pydantic-based configuration for the hosting shell: webhook endpoints of
the external workflow, the Supabase project and session timings.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class AppConfig(BaseModel):
    """Configuration for the PDF chat session.

    Attributes:
        ingest_webhook_url: Endpoint starting the ingestion workflow.
        chat_webhook_url: Endpoint answering chat turns.
        supabase_url: Supabase project URL.
        supabase_key: Supabase API key.
        documents_table: Table of processed documents.
        vectors_table: Table of vector records tagged by filename.
        progress_interval: Seconds between progress narrator steps.
        error_reset_delay: Seconds before a failed ingestion reads idle.
        ingest_timeout: Ingestion request timeout in seconds.
        chat_timeout: Chat request timeout in seconds.
    """

    # Environment defaults go through the same validators as explicit values
    model_config = ConfigDict(validate_default=True)

    ingest_webhook_url: str = Field(
        default_factory=lambda: os.getenv("INGEST_WEBHOOK_URL", ""),
        description="Ingestion webhook endpoint",
    )
    chat_webhook_url: str = Field(
        default_factory=lambda: os.getenv("CHAT_WEBHOOK_URL", ""),
        description="Chat webhook endpoint",
    )
    supabase_url: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_URL", ""),
        description="Supabase project URL",
    )
    supabase_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_KEY", ""),
        description="Supabase API key",
    )
    documents_table: str = Field(
        default_factory=lambda: os.getenv("DOCUMENTS_TABLE", "active_session_files"),
        description="Table of processed documents",
    )
    vectors_table: str = Field(
        default_factory=lambda: os.getenv("VECTORS_TABLE", "documents"),
        description="Table of vector records",
    )
    progress_interval: float = Field(
        default_factory=lambda: float(os.getenv("PROGRESS_INTERVAL", "2.5")),
        gt=0.0,
        description="Seconds between progress narrator steps",
    )
    error_reset_delay: float = Field(
        default_factory=lambda: float(os.getenv("ERROR_RESET_DELAY", "8")),
        ge=0.0,
        description="Seconds before a failed ingestion returns to idle",
    )
    ingest_timeout: float = Field(
        default=300.0,
        gt=0.0,
        description="Ingestion request timeout in seconds",
    )
    chat_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Chat request timeout in seconds",
    )

    @field_validator("ingest_webhook_url", "chat_webhook_url", "supabase_url", "supabase_key")
    @classmethod
    def validate_required(cls, v: str, info) -> str:
        """Validate that endpoints and credentials are provided."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name.upper()} is required. Set it in .env")
        return v.strip()


def get_app_config() -> AppConfig:
    """Create application configuration from environment.

    Returns:
        Configured AppConfig instance.

    Raises:
        ValidationError: If a required setting is missing.
    """
    return AppConfig()
