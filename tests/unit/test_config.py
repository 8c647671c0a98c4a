"""
Unit Tests for Configuration

Tests for settings and configuration management.
"""

import pytest
from pydantic import ValidationError

from atmachetana.config import DEFAULT_JWT_SECRET, Settings


def test_settings_defaults():
    """Test default settings values."""
    settings = Settings()

    assert settings.ENVIRONMENT in ["local", "staging", "production"]
    assert settings.LOG_LEVEL in ["DEBUG", "INFO", "WARNING", "ERROR"]
    assert isinstance(settings.DATABASE_URL, str)
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.OTP_EXPIRY_MINUTES == 10


def test_appointment_policy_defaults_permissive():
    settings = Settings()

    assert settings.APPOINTMENT_CONFIRM_STAFF_ONLY is False
    assert settings.APPOINTMENT_INITIAL_STATUS_STAFF_ONLY is False


def test_settings_environment_specific():
    """Test environment-specific behavior."""
    settings_local = Settings(ENVIRONMENT="local")
    assert settings_local.is_local is True
    assert settings_local.is_production is False

    settings_prod = Settings(ENVIRONMENT="production", JWT_SECRET="a-real-secret")
    assert settings_prod.is_local is False
    assert settings_prod.is_production is True


def test_production_requires_jwt_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        Settings(ENVIRONMENT="production", JWT_SECRET=DEFAULT_JWT_SECRET)


def test_email_sender_prefers_from_address():
    settings = Settings(
        APP_NAME="Atma-Chethana", EMAIL_USER="smtp@example.com", EMAIL_FROM="noreply@example.com"
    )
    assert settings.email_sender == "Atma-Chethana <noreply@example.com>"

    fallback = Settings(APP_NAME="Atma-Chethana", EMAIL_USER="smtp@example.com", EMAIL_FROM="")
    assert fallback.email_sender == "Atma-Chethana <smtp@example.com>"
