"""配置管理器模块."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from product_fidelity.models.app_settings import Settings
from product_fidelity.models.thresholds import FidelityThresholds
from product_fidelity.utils.exceptions import ConfigError
from product_fidelity.utils.logger import setup_logger

logger = setup_logger(__name__)


class ConfigManager:
    """配置管理器.

    负责应用设置的懒加载与重新加载。

    Attributes:
        settings: 应用设置
        thresholds: 由设置得到的保真度阈值
    """

    _instance: Optional["ConfigManager"] = None

    def __new__(cls) -> "ConfigManager":
        """单例模式."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """初始化配置管理器."""
        if self._initialized:
            return

        self._settings: Optional[Settings] = None
        self._initialized = True

        logger.debug("配置管理器初始化完成")

    @property
    def settings(self) -> Settings:
        """获取应用设置."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    @property
    def thresholds(self) -> FidelityThresholds:
        """获取保真度阈值."""
        return FidelityThresholds.from_settings(self.settings)

    def _load_settings(self) -> Settings:
        """从环境变量和 .env 文件加载应用设置.

        Returns:
            Settings 实例

        Raises:
            ConfigError: 配置值无效
        """
        try:
            settings = Settings()
        except ValidationError as e:
            logger.error(f"加载应用设置失败: {e}")
            raise ConfigError(f"加载应用设置失败: {e}")

        logger.debug(
            f"应用设置加载完成: min_psnr={settings.min_psnr}, "
            f"max_mse={settings.max_mse}, "
            f"max_color_delta={settings.max_color_delta}, "
            f"working_width={settings.working_width}"
        )
        return settings

    def reload(self) -> None:
        """重新加载配置."""
        self._settings = None
        logger.info("配置已重新加载")


# 全局配置管理器实例
config_manager = ConfigManager()


def get_config() -> ConfigManager:
    """获取配置管理器实例.

    Returns:
        ConfigManager 单例实例
    """
    return config_manager
