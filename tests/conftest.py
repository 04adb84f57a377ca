"""Pytest 配置和共享 fixtures."""

from __future__ import annotations

import pytest
from PIL import Image

from product_fidelity.models.app_settings import Settings
from product_fidelity.models.thresholds import FidelityThresholds


@pytest.fixture
def full_mask() -> Image.Image:
    """4x4 全部为商品区域的遮罩."""
    return Image.new("L", (4, 4), 255)


@pytest.fixture
def empty_mask() -> Image.Image:
    """4x4 全黑遮罩."""
    return Image.new("L", (4, 4), 0)


@pytest.fixture
def default_thresholds() -> FidelityThresholds:
    """默认阈值 (30, 200, 6)."""
    return FidelityThresholds()


@pytest.fixture
def small_settings() -> Settings:
    """工作宽度 16 的设置，16 像素宽的测试图不会被重采样."""
    return Settings(
        working_width=16,
        min_psnr=30,
        max_mse=200,
        max_color_delta=6,
        concurrent_limit=2,
        mask_resample="nearest",
        mask_source_channel="luminance",
        mask_threshold=128,
    )
