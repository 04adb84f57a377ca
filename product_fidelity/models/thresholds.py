"""保真度阈值模型."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from product_fidelity.utils.constants import (
    DEFAULT_MAX_COLOR_DELTA,
    DEFAULT_MAX_MSE,
    DEFAULT_MIN_PSNR,
)

if TYPE_CHECKING:
    from product_fidelity.models.app_settings import Settings


class FidelityThresholds(BaseModel):
    """保真度阈值.

    三项阈值需同时满足才判定为通过。阈值由调用方从配置中读取后传入，
    计算核心本身不读取任何配置。

    Attributes:
        min_psnr: 最低可接受 PSNR (dB)
        max_mse: 最高可接受 MSE
        max_color_delta: 最高可接受平均色差

    Example:
        >>> thresholds = FidelityThresholds(min_psnr=35)
        >>> thresholds.max_mse
        200.0
    """

    model_config = ConfigDict(frozen=True)

    min_psnr: float = Field(default=DEFAULT_MIN_PSNR, description="最低 PSNR")
    max_mse: float = Field(default=DEFAULT_MAX_MSE, ge=0, description="最高 MSE")
    max_color_delta: float = Field(
        default=DEFAULT_MAX_COLOR_DELTA, ge=0, description="最高平均色差"
    )

    @field_validator("min_psnr", "max_mse", "max_color_delta")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        """阈值必须是有限数值."""
        if math.isnan(v) or math.isinf(v):
            raise ValueError(f"阈值必须是有限数值: {v}")
        return v

    @classmethod
    def from_settings(cls, settings: "Settings") -> "FidelityThresholds":
        """从应用设置构建阈值.

        Args:
            settings: 应用设置

        Returns:
            FidelityThresholds 实例
        """
        return cls(
            min_psnr=settings.min_psnr,
            max_mse=settings.max_mse,
            max_color_delta=settings.max_color_delta,
        )

    def with_overrides(self, **overrides: float | None) -> "FidelityThresholds":
        """返回覆盖部分阈值后的新实例，值为 None 的项保持不变."""
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        return FidelityThresholds(**{**self.model_dump(), **update})
