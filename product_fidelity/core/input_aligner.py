"""校验输入对齐模块.

在进入数值核心之前，把原图、遮罩源图、候选图统一缩放到工作宽度，
并将遮罩二值化。三者尺寸仍不一致时抛出 ShapeMismatchError，
数值核心本身只处理尺寸一致的输入。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image

from product_fidelity.models.app_settings import Settings
from product_fidelity.utils.constants import (
    DEFAULT_WORKING_WIDTH,
    MASK_IN_REGION_LEVEL,
    MaskResample,
    MaskSourceChannel,
)
from product_fidelity.utils.exceptions import ShapeMismatchError
from product_fidelity.utils.image_utils import ensure_rgb, has_transparency
from product_fidelity.utils.logger import setup_logger

logger = setup_logger(__name__)

# 图片缩放使用双线性，遮罩按配置选择
IMAGE_RESAMPLE = Image.Resampling.BILINEAR

MASK_RESAMPLE_FILTERS = {
    MaskResample.NEAREST: Image.Resampling.NEAREST,
    MaskResample.BILINEAR: Image.Resampling.BILINEAR,
}


@dataclass(frozen=True)
class AlignedInputs:
    """对齐后的校验输入."""

    original: Image.Image  # RGB
    mask: Image.Image  # L，取值 0 或 255
    candidate: Image.Image  # RGB

    @property
    def size(self) -> tuple[int, int]:
        """工作尺寸 (宽, 高)."""
        return self.mask.size


def _mask_band(source: Image.Image, source_channel: str) -> Image.Image:
    """取出遮罩源图用于二值化的单通道."""
    if source_channel == MaskSourceChannel.ALPHA and has_transparency(source):
        if source.mode == "P":
            source = source.convert("RGBA")
        return source.getchannel("A")
    if source.mode == "L":
        return source
    return source.convert("L")


def build_mask(
    source: Image.Image,
    threshold: int = MASK_IN_REGION_LEVEL,
    source_channel: str = MaskSourceChannel.LUMINANCE,
) -> Image.Image:
    """从灰度或带透明通道的图片构建二值遮罩.

    Args:
        source: 遮罩源图
        threshold: 亮度（或 alpha）大于该值的像素视为商品区域
        source_channel: luminance 使用灰度值，alpha 使用透明通道

    Returns:
        L 模式遮罩，商品区域为 255，其余为 0
    """
    band = _mask_band(source, source_channel)
    return band.point(lambda v: 255 if v > threshold else 0)


def resize_to_width(
    image: Image.Image,
    width: int = DEFAULT_WORKING_WIDTH,
    resample: int = IMAGE_RESAMPLE,
) -> Image.Image:
    """按宽度等比缩放图片.

    与宽度无关地总是缩放到目标宽度，小图也会被放大。

    Args:
        image: PIL Image 对象
        width: 目标宽度
        resample: 重采样方法

    Returns:
        缩放后的图片
    """
    src_w, src_h = image.size
    if src_w == width:
        return image
    height = max(1, round(src_h * width / src_w))
    return image.resize((width, height), resample)


def align_inputs(
    original: Image.Image,
    mask_source: Image.Image,
    candidate: Image.Image,
    settings: Optional[Settings] = None,
) -> AlignedInputs:
    """把三张图对齐到工作尺寸.

    遮罩先缩放再二值化，因此 mask_resample 决定了边界像素归属。

    Args:
        original: 原图
        mask_source: 遮罩源图（灰度或带透明通道）
        candidate: 候选图
        settings: 应用设置，默认使用 Settings()

    Returns:
        对齐后的输入

    Raises:
        ShapeMismatchError: 缩放后三者尺寸仍不一致
    """
    settings = settings or Settings()
    width = settings.working_width
    mask_filter = MASK_RESAMPLE_FILTERS[settings.mask_resample]

    orig = resize_to_width(ensure_rgb(original), width)
    cand = resize_to_width(ensure_rgb(candidate), width)
    band = _mask_band(mask_source, settings.mask_source_channel)
    mask = build_mask(
        resize_to_width(band, width, mask_filter),
        threshold=settings.mask_threshold,
    )

    if not (orig.size == mask.size == cand.size):
        raise ShapeMismatchError(orig.size, mask.size, cand.size)

    logger.debug(
        f"输入已对齐: {orig.width}x{orig.height} "
        f"(原图 {original.width}x{original.height}, "
        f"候选图 {candidate.width}x{candidate.height}, "
        f"遮罩重采样 {settings.mask_resample})"
    )
    return AlignedInputs(original=orig, mask=mask, candidate=cand)
