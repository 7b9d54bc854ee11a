"""
Unit tests for configuration and error types
"""

import pytest
from pydantic import ValidationError
from core.config import Settings, ImportConfig
from core.exceptions import EnrichmentAPIError, EntityWriteError, ImportPipelineError


class TestImportConfig:

    def test_from_settings(self):
        app_settings = Settings(GEMINI_API_KEY="env-key", IMPORT_BLOCK_SIZE=10, IMPORT_USE_AI=False)

        config = ImportConfig.from_settings(app_settings)

        assert config.gemini_api_key == "env-key"
        assert config.block_size == 10
        assert config.use_ai is False
        assert config.ai_available

    def test_explicit_values_win(self):
        app_settings = Settings(GEMINI_API_KEY="env-key", IMPORT_USE_AI=False)

        config = ImportConfig.from_settings(app_settings, gemini_api_key="db-key", use_ai=True)

        assert config.gemini_api_key == "db-key"
        assert config.use_ai is True

    def test_ai_unavailable_without_key(self):
        assert not ImportConfig(gemini_api_key=None).ai_available
        assert not ImportConfig(gemini_api_key="").ai_available

    def test_immutable(self):
        config = ImportConfig()
        with pytest.raises(ValidationError):
            config.use_ai = False
        assert config.with_overrides(use_ai=False).use_ai is False
        assert config.use_ai is True


class TestExceptions:

    def test_context_and_dict(self):
        cause = ValueError("boom")
        error = EntityWriteError(
            "Failed to persist record",
            context={"union_name": "Sind A", "stage": "cargo"},
            original_exception=cause,
        )

        assert isinstance(error, ImportPipelineError)
        assert error.__cause__ is cause
        assert "stage=cargo" in str(error)
        data = error.to_dict()
        assert data["error_type"] == "EntityWriteError"
        assert data["original_error"] == "boom"

    def test_status_code_in_context(self):
        error = EnrichmentAPIError("Gemini API returned 500", status_code=500)
        assert error.status_code == 500
        assert error.context["status_code"] == 500
