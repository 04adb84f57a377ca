"""命令行入口单元测试."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from product_fidelity.core.config_manager import get_config
from product_fidelity.main import EXIT_ACCEPTED, EXIT_ERROR, EXIT_REJECTED, main
from tests.image_factory import make_solid


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """使用默认阈值、32 像素工作宽度，测试后重新加载."""
    for name in ("MIN_PSNR", "MAX_MSE", "MAX_COLOR_DELTA"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WORKING_WIDTH", "32")
    get_config().reload()
    yield
    get_config().reload()


@pytest.fixture
def image_paths(tmp_path: Path) -> dict[str, Path]:
    """在临时目录写入原图、遮罩和两张候选图."""
    paths = {
        "original": tmp_path / "original.png",
        "mask": tmp_path / "mask.png",
        "good": tmp_path / "good.png",
        "bad": tmp_path / "bad.png",
    }
    make_solid((32, 32), (100, 100, 100)).save(paths["original"])
    Image.new("L", (32, 32), 255).save(paths["mask"])
    make_solid((32, 32), (100, 100, 100)).save(paths["good"])
    make_solid((32, 32), (110, 110, 110)).save(paths["bad"])
    return paths


class TestMain:
    """测试命令行."""

    def test_accepted(
        self, image_paths: dict[str, Path], capsys: pytest.CaptureFixture
    ) -> None:
        """有候选通过时退出码为 0."""
        code = main(
            [
                str(image_paths["original"]),
                str(image_paths["mask"]),
                str(image_paths["bad"]),
                str(image_paths["good"]),
            ]
        )

        out = capsys.readouterr().out.splitlines()
        assert code == EXIT_ACCEPTED
        assert out[0].startswith("REJECT")
        assert "PSNR_TOO_LOW" in out[0]
        assert out[1].startswith("ACCEPT")

    def test_rejected(self, image_paths: dict[str, Path]) -> None:
        """全部未通过时退出码为 1."""
        code = main(
            [
                str(image_paths["original"]),
                str(image_paths["mask"]),
                str(image_paths["bad"]),
            ]
        )

        assert code == EXIT_REJECTED

    def test_threshold_overrides_and_json(
        self, image_paths: dict[str, Path], capsys: pytest.CaptureFixture
    ) -> None:
        """命令行阈值覆盖并输出 JSON."""
        code = main(
            [
                str(image_paths["original"]),
                str(image_paths["mask"]),
                str(image_paths["bad"]),
                "--min-psnr",
                "25",
                "--max-color-delta",
                "10",
                "--json",
            ]
        )

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_ACCEPTED
        assert payload["thresholds"]["min_psnr"] == 25
        assert payload["accepted"] == [0]
        candidate = payload["candidates"][0]
        assert candidate["mse"] == pytest.approx(100.0)
        assert candidate["avg_color_delta"] == pytest.approx(10.0)

    def test_invalid_override(self, image_paths: dict[str, Path]) -> None:
        """无效的阈值覆盖."""
        code = main(
            [
                str(image_paths["original"]),
                str(image_paths["mask"]),
                str(image_paths["good"]),
                "--max-mse",
                "-1",
            ]
        )

        assert code == EXIT_ERROR

    def test_invalid_environment(
        self, image_paths: dict[str, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """环境变量无效时退出码为 2."""
        monkeypatch.setenv("WORKING_WIDTH", "1")
        get_config().reload()

        code = main(
            [
                str(image_paths["original"]),
                str(image_paths["mask"]),
                str(image_paths["good"]),
            ]
        )

        assert code == EXIT_ERROR
