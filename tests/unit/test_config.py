"""Unit tests for AppConfig."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pdfchat.config import AppConfig, get_app_config

REQUIRED = {
    "ingest_webhook_url": "https://workflow.test/webhook/ingest",
    "chat_webhook_url": "https://workflow.test/webhook/chat",
    "supabase_url": "https://project.supabase.test",
    "supabase_key": "anon-key",
}


class TestAppConfig:
    """Tests for AppConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts explicit values for every field."""
        config = AppConfig(
            **REQUIRED,
            documents_table="files",
            vectors_table="chunks",
            progress_interval=1.0,
            error_reset_delay=3.0,
        )

        assert config.documents_table == "files"
        assert config.vectors_table == "chunks"
        assert config.progress_interval == 1.0
        assert config.error_reset_delay == 3.0

    def test_config_with_default_values(self) -> None:
        """Config uses the documented defaults when the environment is silent."""
        with patch.dict("os.environ", {}, clear=True):
            config = AppConfig(**REQUIRED)

        assert config.documents_table == "active_session_files"
        assert config.vectors_table == "documents"
        assert config.progress_interval == 2.5
        assert config.error_reset_delay == 8.0
        assert config.chat_timeout == 120.0

    def test_config_strips_whitespace(self) -> None:
        config = AppConfig(**{**REQUIRED, "supabase_key": "  anon-key  "})

        assert config.supabase_key == "anon-key"

    @pytest.mark.parametrize("field", sorted(REQUIRED))
    def test_config_fails_with_missing_required_field(self, field: str) -> None:
        """Each endpoint and credential is mandatory."""
        with pytest.raises(ValidationError) as exc_info:
            AppConfig(**{**REQUIRED, field: "   "})

        assert f"{field.upper()} is required" in str(exc_info.value)

    def test_config_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AppConfig(**REQUIRED, progress_interval=0)

        assert "progress_interval" in str(exc_info.value)


class TestGetAppConfig:
    """Tests for get_app_config factory function."""

    def test_get_config_from_environment(self) -> None:
        env = {
            "INGEST_WEBHOOK_URL": "https://env.test/ingest",
            "CHAT_WEBHOOK_URL": "https://env.test/chat",
            "SUPABASE_URL": "https://env.supabase.test",
            "SUPABASE_KEY": "env-key",
            "ERROR_RESET_DELAY": "4",
        }
        with patch.dict("os.environ", env, clear=True):
            config = get_app_config()

        assert config.ingest_webhook_url == "https://env.test/ingest"
        assert config.supabase_key == "env-key"
        assert config.error_reset_delay == 4.0

    def test_get_config_fails_without_env_vars(self) -> None:
        with patch.dict("os.environ", {}, clear=True), pytest.raises(ValidationError):
            get_app_config()

    def test_missing_env_var_is_named(self) -> None:
        env = {
            "INGEST_WEBHOOK_URL": "https://env.test/ingest",
            "CHAT_WEBHOOK_URL": "https://env.test/chat",
            "SUPABASE_URL": "https://env.supabase.test",
        }
        with patch.dict("os.environ", env, clear=True), pytest.raises(ValidationError) as exc_info:
            get_app_config()

        assert "SUPABASE_KEY is required" in str(exc_info.value)

    def test_env_interval_is_bounded(self) -> None:
        env = {
            "INGEST_WEBHOOK_URL": "https://env.test/ingest",
            "CHAT_WEBHOOK_URL": "https://env.test/chat",
            "SUPABASE_URL": "https://env.supabase.test",
            "SUPABASE_KEY": "env-key",
            "PROGRESS_INTERVAL": "0",
        }
        with patch.dict("os.environ", env, clear=True), pytest.raises(ValidationError) as exc_info:
            get_app_config()

        assert "progress_interval" in str(exc_info.value)
