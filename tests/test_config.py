"""Unit tests for RenderSettings."""

import math

import pytest


class TestRenderSettings:
    """Tests for render settings defaults and validation."""

    def test_defaults(self):
        from src.spheretrace.core.config import RenderSettings

        settings = RenderSettings()
        assert settings.image_width == 400
        assert settings.image_height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        assert settings.seed is None
        assert settings.arch == "cpu"
        settings.validate()

    def test_height_truncates(self):
        from src.spheretrace.core.config import RenderSettings

        assert RenderSettings(image_width=100, aspect_ratio=3.0).image_height == 33

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"image_width": 0},
            {"aspect_ratio": 0.0},
            {"aspect_ratio": -1.0},
            {"aspect_ratio": math.inf},
            {"image_width": 1, "aspect_ratio": 2.0},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"arch": "tpu"},
        ],
    )
    def test_invalid(self, kwargs):
        from src.spheretrace.core.config import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs).validate()

    def test_zero_depth_allowed(self):
        from src.spheretrace.core.config import RenderSettings

        RenderSettings(max_depth=0).validate()
