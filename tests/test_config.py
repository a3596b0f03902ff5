from pathlib import Path

import pytest

from budget_core.config import Settings
from budget_core.exceptions import ValidationError


def test_settings_defaults():
    settings = Settings.from_env({})

    assert settings.fiscal_start_month == 4
    assert settings.env == "prod"
    assert settings.allowed_origins == []
    assert settings.snapshot_path is None
    assert settings.log_level == "INFO"
    assert not settings.is_development


def test_settings_read_environment():
    settings = Settings.from_env({
        "BUDGET_TRACKER_FISCAL_START_MONTH": " 1 ",
        "BUDGET_TRACKER_ENV": "Development",
        "BUDGET_TRACKER_ALLOWED_ORIGINS": "http://a.test, ,http://b.test",
        "BUDGET_TRACKER_SNAPSHOT": "data/snapshot.json",
        "BUDGET_TRACKER_LOG_LEVEL": "debug",
    })

    assert settings.fiscal_start_month == 1
    assert settings.is_development
    assert settings.allowed_origins == ["http://a.test", "http://b.test"]
    assert settings.snapshot_path == Path("data/snapshot.json")
    assert settings.log_level == "DEBUG"


def test_settings_blank_values_fall_back_to_defaults():
    settings = Settings.from_env({"BUDGET_TRACKER_FISCAL_START_MONTH": "  "})

    assert settings.fiscal_start_month == 4


@pytest.mark.parametrize("month", ["0", "13", "april"])
def test_settings_reject_invalid_fiscal_start_month(month):
    with pytest.raises(ValidationError):
        Settings.from_env({"BUDGET_TRACKER_FISCAL_START_MONTH": month})


def test_settings_reject_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings.from_env({"BUDGET_TRACKER_LOG_LEVEL": "chatty"})


def test_explicit_fiscal_start_month_ignores_environment():
    settings = Settings.from_env(
        {"BUDGET_TRACKER_FISCAL_START_MONTH": "15"}, fiscal_start_month=1
    )

    assert settings.fiscal_start_month == 1


def test_explicit_fiscal_start_month_is_validated():
    with pytest.raises(ValidationError):
        Settings.from_env({}, fiscal_start_month=0)
