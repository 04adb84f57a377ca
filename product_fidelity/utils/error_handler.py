"""错误处理工具模块.

提供统一的错误消息映射，供命令行等对外接口使用。
"""

from __future__ import annotations

from product_fidelity.utils.exceptions import (
    AppException,
    ConfigError,
    ImageNotFoundError,
    ImageProcessError,
    InvalidDataUriError,
    ShapeMismatchError,
)

# 错误消息映射，子类需排在父类之前
ERROR_MESSAGES = {
    ImageNotFoundError: "图片文件不存在，请检查路径",
    InvalidDataUriError: "图片 Data URI 格式无效",
    ShapeMismatchError: "原图、遮罩与候选图尺寸无法对齐",
    ImageProcessError: "图片处理失败，请检查图片文件",
    ConfigError: "配置错误，请检查环境变量或 .env 文件",
}


def get_user_friendly_message(exception: Exception) -> str:
    """获取用户友好的错误消息.

    Args:
        exception: 异常对象

    Returns:
        用户友好的错误消息
    """
    for exc_type, message in ERROR_MESSAGES.items():
        if isinstance(exception, exc_type):
            return message

    if isinstance(exception, AppException):
        return exception.message

    return "操作失败，请稍后重试"

