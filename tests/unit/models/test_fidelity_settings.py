"""阈值与应用设置模型单元测试."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from product_fidelity.models.app_settings import Settings
from product_fidelity.models.thresholds import FidelityThresholds


class TestFidelityThresholds:
    """测试保真度阈值."""

    def test_defaults(self) -> None:
        """默认阈值."""
        thresholds = FidelityThresholds()

        assert thresholds.min_psnr == 30.0
        assert thresholds.max_mse == 200.0
        assert thresholds.max_color_delta == 6.0

    def test_frozen(self) -> None:
        """阈值不可变."""
        thresholds = FidelityThresholds()

        with pytest.raises(ValidationError):
            thresholds.max_mse = 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_mse": -1},
            {"max_color_delta": -0.5},
            {"min_psnr": float("nan")},
            {"max_mse": float("inf")},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """负值与非有限值无效."""
        with pytest.raises(ValidationError):
            FidelityThresholds(**kwargs)

    def test_from_settings(self) -> None:
        """从设置构建."""
        settings = Settings(min_psnr=35, max_mse=150, max_color_delta=4)

        thresholds = FidelityThresholds.from_settings(settings)

        assert thresholds == FidelityThresholds(
            min_psnr=35, max_mse=150, max_color_delta=4
        )

    def test_with_overrides(self) -> None:
        """None 表示不覆盖."""
        base = FidelityThresholds()

        updated = base.with_overrides(min_psnr=40, max_mse=None)

        assert updated.min_psnr == 40
        assert updated.max_mse == base.max_mse
        assert base.with_overrides() is base


class TestSettings:
    """测试应用设置."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """从环境变量读取阈值."""
        monkeypatch.setenv("MIN_PSNR", "32.5")
        monkeypatch.setenv("MAX_MSE", "120")
        monkeypatch.setenv("MAX_COLOR_DELTA", "3")
        monkeypatch.setenv("MASK_RESAMPLE", "Bilinear")

        settings = Settings()

        assert settings.min_psnr == 32.5
        assert settings.max_mse == 120
        assert settings.max_color_delta == 3
        assert settings.mask_resample == "bilinear"

    def test_log_level_normalized(self) -> None:
        """日志级别转为大写."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """无效的日志级别."""
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"working_width": 8},
            {"working_width": 10000},
            {"mask_threshold": 255},
            {"mask_resample": "bicubic"},
            {"mask_source_channel": "red"},
            {"concurrent_limit": 0},
            {"max_mse": -1},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """超出范围的值."""
        with pytest.raises(ValidationError):
            Settings(**kwargs)
