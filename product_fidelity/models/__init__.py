"""数据模型模块."""

from product_fidelity.models.app_settings import Settings
from product_fidelity.models.thresholds import FidelityThresholds

__all__ = [
    "FidelityThresholds",
    "Settings",
]
