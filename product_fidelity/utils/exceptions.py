"""自定义异常类."""

from __future__ import annotations

from typing import Optional, Tuple


class AppException(Exception):
    """应用基础异常类.

    所有自定义异常都应继承此类。

    Attributes:
        message: 错误消息
        code: 错误代码
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        """初始化异常.

        Args:
            message: 错误消息
            code: 错误代码
        """
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        """返回异常字符串表示."""
        return f"[{self.code}] {self.message}"


# ===================
# 配置相关异常
# ===================
class ConfigError(AppException):
    """配置错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG_ERROR")


# ===================
# 图片处理相关异常
# ===================
class ImageProcessError(AppException):
    """图片处理错误异常."""

    def __init__(self, message: str, code: str = "IMAGE_PROCESS_ERROR") -> None:
        super().__init__(message, code)


class ImageNotFoundError(ImageProcessError):
    """图片文件未找到异常."""

    def __init__(self, path: str) -> None:
        super().__init__(f"图片文件未找到: {path}", "DECODE_ERROR")


class ImageCorruptedError(ImageProcessError):
    """图片数据损坏或无法解码异常."""

    def __init__(self, source: str) -> None:
        super().__init__(f"图片数据损坏或无法读取: {source}", "DECODE_ERROR")


class ImageTooLargeError(ImageProcessError):
    """图片数据过大异常."""

    def __init__(
        self, size: Optional[int], max_size: int, unit: str = "bytes"
    ) -> None:
        if unit == "pixels":
            message = f"图片像素数超过解码上限 {max_size}"
        else:
            size_mb = (size or 0) / (1024 * 1024)
            max_mb = max_size / (1024 * 1024)
            message = f"图片数据过大 ({size_mb:.1f}MB)，最大允许 {max_mb:.1f}MB"
        super().__init__(message, "DECODE_ERROR")


class InvalidDataUriError(ImageProcessError):
    """Data URI 格式无效异常."""

    def __init__(self, preview: str) -> None:
        super().__init__(f"无效的图片 Data URI: {preview!r}", "DECODE_ERROR")


class ShapeMismatchError(ImageProcessError):
    """原图、遮罩、候选图尺寸不一致异常."""

    def __init__(
        self,
        original: Tuple[int, int],
        mask: Tuple[int, int],
        candidate: Tuple[int, int],
    ) -> None:
        self.sizes = {"original": original, "mask": mask, "candidate": candidate}
        super().__init__(
            "尺寸不一致: "
            f"原图 {original[0]}x{original[1]}, "
            f"遮罩 {mask[0]}x{mask[1]}, "
            f"候选图 {candidate[0]}x{candidate[1]}",
            "SHAPE_MISMATCH",
        )
