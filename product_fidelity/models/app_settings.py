"""应用设置模型."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from product_fidelity.utils.constants import (
    DEFAULT_CONCURRENT_LIMIT,
    DEFAULT_MAX_COLOR_DELTA,
    DEFAULT_MAX_MSE,
    DEFAULT_MIN_PSNR,
    DEFAULT_WORKING_WIDTH,
    MASK_IN_REGION_LEVEL,
    MAX_CONCURRENT_LIMIT,
    MAX_WORKING_WIDTH,
    MIN_WORKING_WIDTH,
)


class Settings(BaseSettings):
    """应用设置.

    支持从环境变量和 .env 文件加载配置，环境变量名不区分大小写，
    例如 ``MIN_PSNR``、``MAX_MSE``、``MAX_COLOR_DELTA``。

    Attributes:
        min_psnr: 最低可接受 PSNR
        max_mse: 最高可接受 MSE
        max_color_delta: 最高可接受平均色差
        working_width: 比较前统一缩放到的宽度
        mask_threshold: 遮罩二值化阈值
        mask_resample: 遮罩缩放重采样方式
        mask_source_channel: 遮罩取值通道
        concurrent_limit: 批量校验并发数
        log_level: 日志级别
        debug: 调试模式
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 保真度阈值
    min_psnr: float = Field(
        default=DEFAULT_MIN_PSNR,
        description="最低可接受 PSNR，越高越严格",
    )

    max_mse: float = Field(
        default=DEFAULT_MAX_MSE,
        ge=0,
        description="最高可接受 MSE，越低越严格",
    )

    max_color_delta: float = Field(
        default=DEFAULT_MAX_COLOR_DELTA,
        ge=0,
        description="最高可接受平均色差",
    )

    # 对齐配置
    working_width: int = Field(
        default=DEFAULT_WORKING_WIDTH,
        ge=MIN_WORKING_WIDTH,
        le=MAX_WORKING_WIDTH,
        description="比较前统一缩放到的宽度",
    )

    mask_threshold: int = Field(
        default=MASK_IN_REGION_LEVEL,
        ge=0,
        le=254,
        description="遮罩像素大于该值视为商品区域",
    )

    mask_resample: Literal["nearest", "bilinear"] = Field(
        default="nearest",
        description="遮罩缩放重采样方式",
    )

    mask_source_channel: Literal["luminance", "alpha"] = Field(
        default="luminance",
        description="遮罩取值通道",
    )

    # 并发配置
    concurrent_limit: int = Field(
        default=DEFAULT_CONCURRENT_LIMIT,
        ge=1,
        le=MAX_CONCURRENT_LIMIT,
        description="批量校验并发数",
    )

    # 应用配置
    log_level: str = Field(
        default="INFO",
        description="日志级别",
    )

    debug: bool = Field(
        default=False,
        description="调试模式",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}，有效值: {valid_levels}")
        return upper_v

    @field_validator("mask_resample", "mask_source_channel", mode="before")
    @classmethod
    def normalize_choice(cls, v: object) -> object:
        """选项值统一为小写."""
        if isinstance(v, str):
            return v.strip().lower()
        return v
