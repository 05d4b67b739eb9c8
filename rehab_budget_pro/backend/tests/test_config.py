# backend/tests/test_config.py
from __future__ import annotations

import pytest

from app.config import Settings
from app.domain.economics import thresholds_from_settings


def test_defaults_match_calculator_thresholds():
    s = Settings()
    assert s.mao_arv_multiplier == 0.70
    assert s.roi_threshold_good == 15.0
    assert s.roi_threshold_fair == 10.0

    th = thresholds_from_settings()
    assert th.mao_arv_multiplier == 0.70
    assert th.variance_warning == 5.0
    assert th.variance_critical == 10.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"mao_arv_multiplier": 0.0},
        {"mao_arv_multiplier": 1.2},
        {"roi_threshold_good": 5.0, "roi_threshold_fair": 10.0},
        {"variance_warning_percent": 12.0, "variance_critical_percent": 10.0},
        {"app_env": "prod", "cors_allow_origins": ["*"]},
    ],
)
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValueError):
        Settings(**overrides)


def test_prod_with_explicit_origins_is_fine():
    s = Settings(app_env="prod", cors_allow_origins=["https://app.rehabpro.example"])
    assert s.app_env == "prod"
