"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from promption.config import Settings
from promption.core.constants import DEFAULT_INSECURE_SECRET


class TestSettings:
    def test_async_database_url(self):
        settings = Settings(database_url="postgresql://u:p@db:5432/promption")

        assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/promption"

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(auth_jwt_secret="too-short")

    def test_insecure_default_rejected_in_production(self):
        settings = Settings(environment="production", auth_jwt_secret=DEFAULT_INSECURE_SECRET)

        with pytest.raises(ValueError, match="AUTH_JWT_SECRET"):
            _ = settings.is_production

    def test_production_with_real_secret(self):
        settings = Settings(environment="production", auth_jwt_secret="x" * 40)

        assert settings.is_production is True
        assert settings.is_development is False
