from __future__ import annotations

import pytest

from runscore.config.overrides import apply_settings_overrides
from runscore.config.settings import get_settings


def test_apply_settings_overrides_returns_same_object_when_none():
    settings = get_settings()

    # No overrides is a no-op; the shared settings object comes back untouched.
    assert apply_settings_overrides(settings, None) is settings
    assert apply_settings_overrides(settings, {}) is settings


def test_apply_settings_overrides_can_override_allowed_numeric_knobs():
    settings = get_settings()
    overrides = {
        "scoring": {"reason_min_spread": 0.25},
        "features": {"popularity": {"rating_reference_count": 50}},
        "categories": {"popular_min_popularity": 0.7},
    }

    out = apply_settings_overrides(settings, overrides)

    assert out.scoring.reason_min_spread == 0.25
    assert out.features.popularity.rating_reference_count == 50
    assert out.categories.popular_min_popularity == 0.7
    # Sibling knobs survive the deep merge.
    assert out.scoring.composite_weights == settings.scoring.composite_weights
    assert out.features.weather == settings.features.weather

    # The cached settings must not leak the override into other requests.
    assert settings.scoring.reason_min_spread != 0.25
    assert settings.features.popularity.rating_reference_count != 50


def test_apply_settings_overrides_rejects_disallowed_keys_with_clear_path():
    settings = get_settings()

    with pytest.raises(ValueError, match=r"settings_overrides contains a disallowed key: 'catalog'"):
        apply_settings_overrides(settings, {"catalog": {"path": "/etc/passwd"}})

    # Provider settings are never request-tunable; the weather path does not read per-request settings.
    with pytest.raises(ValueError, match=r"disallowed key: 'ingestion'"):
        apply_settings_overrides(settings, {"ingestion": {"weather": {"cache_ttl_seconds": 60}}})

    with pytest.raises(ValueError, match=r"features\.district_factors"):
        apply_settings_overrides(settings, {"features": {"district_factors": {"path": "/etc/passwd"}}})


def test_apply_settings_overrides_rejects_wrong_value_shapes_for_restricted_subtrees():
    settings = get_settings()

    with pytest.raises(ValueError, match=r"settings_overrides key 'features' must be a mapping"):
        apply_settings_overrides(settings, {"features": 1})


def test_apply_settings_overrides_revalidates_values():
    settings = get_settings()

    # Out-of-range values are rejected by the Settings model itself.
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"categories": {"perfect_match_min_confidence": 1.5}})
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"scoring": {"composite_weights": {"weather": -1.0}}})
