"""图片工具函数模块.

提供图片解码、Data URI 解析、格式转换等工具函数。
"""

from __future__ import annotations

import base64
import binascii
import io
import re
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from product_fidelity.utils.constants import MAX_IMAGE_FILE_SIZE
from product_fidelity.utils.exceptions import (
    ImageCorruptedError,
    ImageNotFoundError,
    ImageTooLargeError,
    InvalidDataUriError,
)
from product_fidelity.utils.logger import setup_logger

logger = setup_logger(__name__)

# 可接受的图片来源
ImageSource = Union[bytes, bytearray, str, Path, Image.Image]

_DATA_URI_PATTERN = re.compile(
    r"^data:image/(?P<format>[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL
)


def data_uri_to_bytes(data_uri: str) -> bytes:
    """解析 Data URI 为字节数据.

    仅接受 ``data:image/<格式>;base64,<数据>`` 形式。

    Args:
        data_uri: Data URI 字符串

    Returns:
        解码后的图片字节数据

    Raises:
        InvalidDataUriError: 格式不符或 Base64 数据无效
    """
    match = _DATA_URI_PATTERN.match(data_uri or "")
    if not match:
        raise InvalidDataUriError((data_uri or "")[:32])

    try:
        return base64.b64decode(match.group("payload"), validate=False)
    except (binascii.Error, ValueError):
        raise InvalidDataUriError(data_uri[:32])


def image_to_data_uri(image: Image.Image, format: str = "PNG") -> str:
    """图片转 Data URI.

    Args:
        image: PIL Image 对象
        format: 图片格式

    Returns:
        Data URI 字符串
    """
    data = image_to_bytes(image, format=format)
    mime = "jpeg" if format.upper() in ("JPG", "JPEG") else format.lower()
    return f"data:image/{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _pixel_limit_error() -> ImageTooLargeError:
    # Pillow 在像素数超过 MAX_IMAGE_PIXELS 两倍时拒绝解码
    limit = (Image.MAX_IMAGE_PIXELS or 0) * 2
    return ImageTooLargeError(None, limit, unit="pixels")


def bytes_to_image(data: bytes) -> Image.Image:
    """字节数据转图片.

    图片会被完整加载到内存，之后不再依赖原始缓冲区。

    Args:
        data: 图片字节数据

    Returns:
        PIL Image 对象

    Raises:
        ImageTooLargeError: 数据或像素数超过限制
        ImageCorruptedError: 无法解码
    """
    if len(data) > MAX_IMAGE_FILE_SIZE:
        raise ImageTooLargeError(len(data), MAX_IMAGE_FILE_SIZE)

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except Image.DecompressionBombError as e:
        logger.error(f"图片像素数超限: {len(data)} bytes, {e}")
        raise _pixel_limit_error()
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"解码图片失败: {len(data)} bytes, {e}")
        raise ImageCorruptedError(f"<{len(data)} bytes>")


def load_image(path: Path | str) -> Image.Image:
    """从文件加载图片.

    Args:
        path: 图片文件路径

    Returns:
        PIL Image 对象

    Raises:
        ImageNotFoundError: 文件不存在
        ImageTooLargeError: 像素数超过解码上限
        ImageCorruptedError: 文件损坏
    """
    path = Path(path)
    if not path.is_file():
        raise ImageNotFoundError(str(path))

    try:
        img = Image.open(path)
        img.load()
        return img
    except Image.DecompressionBombError as e:
        logger.error(f"图片像素数超限: {path}, {e}")
        raise _pixel_limit_error()
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"加载图片失败: {path}, {e}")
        raise ImageCorruptedError(str(path))


def load_image_source(source: ImageSource) -> Image.Image:
    """从任意支持的来源加载图片.

    支持字节数据、Data URI、文件路径和 PIL Image 对象。

    Args:
        source: 图片来源

    Returns:
        PIL Image 对象
    """
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        return bytes_to_image(bytes(source))
    if isinstance(source, str) and source.startswith("data:"):
        return bytes_to_image(data_uri_to_bytes(source))
    if isinstance(source, (str, Path)):
        return load_image(source)
    raise TypeError(f"不支持的图片来源类型: {type(source).__name__}")


def image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """图片转字节数据.

    Args:
        image: PIL Image 对象
        format: 图片格式

    Returns:
        图片字节数据
    """
    format = "JPEG" if format.upper() == "JPG" else format.upper()
    if format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return buffer.getvalue()


def has_transparency(image: Image.Image) -> bool:
    """检查图片是否有透明通道.

    Args:
        image: PIL Image 对象

    Returns:
        是否有透明通道
    """
    if image.mode in ("RGBA", "LA", "PA"):
        return True
    if image.mode == "P" and "transparency" in image.info:
        return True
    return False


def ensure_rgb(image: Image.Image) -> Image.Image:
    """确保图片为 RGB 模式.

    Args:
        image: PIL Image 对象

    Returns:
        RGB 模式的图片
    """
    if image.mode != "RGB":
        return image.convert("RGB")
    return image
