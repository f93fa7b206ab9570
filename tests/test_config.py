import pytest

from stockdrop_monitor.config import load_settings
from stockdrop_monitor.providers.core import ConfigurationError


def test_defaults_without_environment():
    settings = load_settings({})

    assert settings.quotes.batch_size == 10
    assert settings.monitor.daily_notification_limit == 5
    assert settings.monitor.default_threshold == 5
    assert settings.missing_credentials() == [
        "FMP_API_KEY",
        "ONESIGNAL_APP_ID",
        "ONESIGNAL_REST_API_KEY",
    ]


def test_environment_overrides():
    settings = load_settings(
        {
            "FMP_API_KEY": "k",
            "ONESIGNAL_APP_ID": "a",
            "ONESIGNAL_REST_API_KEY": "r",
            "QUOTE_BATCH_SIZE": "5",
            "DATABASE_URL": "sqlite://",
            "SQL_ECHO": "1",
        }
    )

    assert settings.quotes.batch_size == 5
    assert settings.database.echo is True
    settings.require_credentials()


def test_settings_are_immutable():
    settings = load_settings({})

    with pytest.raises(Exception):
        settings.quotes.api_key = "changed"


def test_invalid_values_raise_configuration_error():
    with pytest.raises(ConfigurationError):
        load_settings({"QUOTE_BATCH_SIZE": "zero"})


def test_require_credentials_names_missing_keys():
    with pytest.raises(ConfigurationError, match="ONESIGNAL_APP_ID"):
        load_settings({"FMP_API_KEY": "k", "ONESIGNAL_REST_API_KEY": "r"}).require_credentials()


def test_daily_limit_can_be_lowered_but_not_raised():
    assert load_settings({"DAILY_NOTIFICATION_LIMIT": "3"}).monitor.daily_notification_limit == 3

    with pytest.raises(ConfigurationError):
        load_settings({"DAILY_NOTIFICATION_LIMIT": "6"})
