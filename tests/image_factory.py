"""测试用图片构造函数."""

from __future__ import annotations

from typing import Iterable, Tuple

from PIL import Image

RGB = Tuple[int, int, int]


def make_solid(size: Tuple[int, int], color: RGB, mode: str = "RGB") -> Image.Image:
    """创建纯色图片."""
    if mode == "RGBA":
        return Image.new("RGBA", size, (*color, 255))
    return Image.new(mode, size, color)


def make_mask(size: Tuple[int, int], in_region: Iterable[Tuple[int, int]]) -> Image.Image:
    """创建 L 模式遮罩，指定坐标为 255."""
    mask = Image.new("L", size, 0)
    for xy in in_region:
        mask.putpixel(xy, 255)
    return mask


def checkerboard(size: Tuple[int, int]) -> list[Tuple[int, int]]:
    """棋盘格中 (x + y) 为偶数的坐标."""
    w, h = size
    return [(x, y) for y in range(h) for x in range(w) if (x + y) % 2 == 0]
