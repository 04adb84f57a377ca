"""图片工具函数单元测试."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest
from PIL import Image

from product_fidelity.utils.exceptions import (
    ImageCorruptedError,
    ImageNotFoundError,
    ImageTooLargeError,
    InvalidDataUriError,
)
from product_fidelity.utils.image_utils import (
    bytes_to_image,
    data_uri_to_bytes,
    ensure_rgb,
    has_transparency,
    image_to_bytes,
    image_to_data_uri,
    load_image_source,
)


class TestDataUri:
    """测试 Data URI 解析."""

    def test_roundtrip_png(self) -> None:
        """PNG 图片转 Data URI 后可解码."""
        image = Image.new("RGB", (3, 2), (1, 2, 3))

        uri = image_to_data_uri(image)

        assert uri.startswith("data:image/png;base64,")
        decoded = bytes_to_image(data_uri_to_bytes(uri))
        assert decoded.size == (3, 2)
        assert decoded.getpixel((0, 0)) == (1, 2, 3)

    def test_jpeg_mime(self) -> None:
        """JPEG 使用 image/jpeg."""
        uri = image_to_data_uri(Image.new("RGBA", (2, 2)), format="JPG")

        assert uri.startswith("data:image/jpeg;base64,")

    @pytest.mark.parametrize(
        "value",
        ["", "hello", "data:text/plain;base64,AAAA", "data:image/png,AAAA"],
    )
    def test_invalid(self, value: str) -> None:
        """格式不符."""
        with pytest.raises(InvalidDataUriError):
            data_uri_to_bytes(value)

    def test_payload_decoded(self) -> None:
        """返回 Base64 解码后的数据."""
        payload = base64.b64encode(b"\x89PNG").decode()

        assert data_uri_to_bytes(f"data:image/png;base64,{payload}") == b"\x89PNG"


class TestDecoding:
    """测试图片解码."""

    def test_corrupted_bytes(self) -> None:
        """无法识别的数据."""
        with pytest.raises(ImageCorruptedError) as exc_info:
            bytes_to_image(b"garbage")

        assert exc_info.value.code == "DECODE_ERROR"

    def test_pixel_limit_exceeded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """像素数超过解码上限."""
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        data = image_to_bytes(Image.new("L", (32, 32), 0))
        path = tmp_path / "huge.png"
        path.write_bytes(data)

        with pytest.raises(ImageTooLargeError) as exc_info:
            bytes_to_image(data)
        assert exc_info.value.code == "DECODE_ERROR"

        with pytest.raises(ImageTooLargeError):
            load_image_source(path)

    def test_load_source_dispatch(self, tmp_path: Path) -> None:
        """不同来源类型."""
        image = Image.new("L", (2, 2), 7)
        data = image_to_bytes(image)
        path = tmp_path / "mask.png"
        path.write_bytes(data)

        assert load_image_source(image) is image
        assert load_image_source(data).size == (2, 2)
        assert load_image_source(bytearray(data)).size == (2, 2)
        assert load_image_source(path).getpixel((0, 0)) == 7
        assert load_image_source(str(path)).size == (2, 2)
        assert load_image_source(image_to_data_uri(image)).size == (2, 2)

    def test_load_source_missing_path(self, tmp_path: Path) -> None:
        """文件不存在."""
        with pytest.raises(ImageNotFoundError):
            load_image_source(tmp_path / "nope.png")

    def test_load_source_unsupported_type(self) -> None:
        """不支持的类型."""
        with pytest.raises(TypeError):
            load_image_source(123)  # type: ignore[arg-type]


class TestModes:
    """测试模式判断与转换."""

    def test_has_transparency(self) -> None:
        """透明通道判断."""
        assert has_transparency(Image.new("RGBA", (1, 1)))
        assert has_transparency(Image.new("LA", (1, 1)))
        assert not has_transparency(Image.new("RGB", (1, 1)))

    def test_ensure_rgb(self) -> None:
        """转换为 RGB."""
        rgb = Image.new("RGB", (1, 1))

        assert ensure_rgb(rgb) is rgb
        assert ensure_rgb(Image.new("L", (1, 1))).mode == "RGB"
