"""商品区域保真度校验模块.

比较 AI 编辑后的商品图与原图在遮罩区域内的差异，判断编辑结果是否
保留了商品本身，从而决定能否发布。

Features:
    - 遮罩区域内的 MSE / PSNR 计算
    - 亮度均值色差（简化启发式，非 CIE Delta-E）
    - 空遮罩直接判定失败
    - 纯函数，无 I/O，可并发调用
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from PIL import Image

from product_fidelity.models.thresholds import FidelityThresholds
from product_fidelity.utils.constants import (
    COLOR_CHANNELS,
    MASK_IN_REGION_LEVEL,
    MAX_PIXEL_VALUE,
    PSNR_EPSILON,
)
from product_fidelity.utils.image_utils import ensure_rgb
from product_fidelity.utils.logger import setup_logger

logger = setup_logger(__name__)

# MSE 为 0 时得到的 PSNR，即可能出现的最大有限值 (约 168.13 dB)
MAX_FINITE_PSNR = 10 * math.log10(MAX_PIXEL_VALUE**2 / PSNR_EPSILON)


class IssueCode:
    """校验问题代码."""

    EMPTY_MASK = "EMPTY_MASK"
    PSNR_TOO_LOW = "PSNR_TOO_LOW"
    MSE_TOO_HIGH = "MSE_TOO_HIGH"
    COLOR_DELTA_TOO_HIGH = "COLOR_DELTA_TOO_HIGH"
    SHAPE_MISMATCH = "SHAPE_MISMATCH"
    DECODE_ERROR = "DECODE_ERROR"
    CHECK_ERROR = "CHECK_ERROR"


@dataclass(frozen=True)
class FidelityIssue:
    """校验未通过的原因."""

    code: str
    message: str


@dataclass
class FidelityVerdict:
    """保真度校验结论.

    Attributes:
        accepted: 是否通过
        mse: 遮罩区域均方误差
        psnr: 遮罩区域峰值信噪比 (dB)
        avg_color_delta: 遮罩区域平均亮度差
        pixel_count: 参与比较的遮罩内像素数
        issues: 未通过的原因列表
        metadata: 附加信息（尺寸等，供日志使用）
    """

    accepted: bool
    mse: float = 0.0
    psnr: float = 0.0
    avg_color_delta: float = 0.0
    pixel_count: int = 0
    issues: List[FidelityIssue] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def is_accepted(self) -> bool:
        """是否通过校验."""
        return self.accepted

    @property
    def issue_codes(self) -> List[str]:
        """问题代码列表."""
        return [issue.code for issue in self.issues]

    @classmethod
    def rejected(
        cls, issue: FidelityIssue, metadata: Optional[dict] = None
    ) -> "FidelityVerdict":
        """构造未评分的失败结论，所有指标为 0."""
        return cls(accepted=False, issues=[issue], metadata=metadata or {})

    def to_dict(self) -> dict[str, Any]:
        """转换为字典."""
        return {
            "accepted": self.accepted,
            "mse": self.mse,
            "psnr": self.psnr,
            "avg_color_delta": self.avg_color_delta,
            "pixel_count": self.pixel_count,
            "issues": [
                {"code": issue.code, "message": issue.message}
                for issue in self.issues
            ],
            "metadata": dict(self.metadata),
        }


def compute_psnr(mse: float) -> float:
    """根据 MSE 计算 PSNR.

    分母加入 PSNR_EPSILON，MSE 为 0 时结果为 MAX_FINITE_PSNR 而不是无穷大。
    """
    return 10 * math.log10(MAX_PIXEL_VALUE**2 / (mse + PSNR_EPSILON))


def evaluate(
    original: Image.Image,
    mask: Image.Image,
    candidate: Image.Image,
    thresholds: Optional[FidelityThresholds] = None,
) -> FidelityVerdict:
    """评估候选图在遮罩区域内对原图的保真度.

    三张图需已对齐到相同尺寸（见 input_aligner）。只比较 R、G、B 三个通道，
    alpha 忽略。遮罩值大于 128 的像素视为商品区域。尺寸不一致时按扁平像素序号
    遍历三者共有的部分（宽度不同时行会错位），不做校验也不抛异常。

    Args:
        original: 原图
        mask: 商品遮罩（单通道，已二值化）
        candidate: 候选图
        thresholds: 阈值，默认使用 FidelityThresholds()

    Returns:
        保真度校验结论

    Example:
        >>> verdict = evaluate(original, mask, candidate, FidelityThresholds())
        >>> verdict.accepted, round(verdict.psnr, 2)
        (False, 28.13)
    """
    thresholds = thresholds or FidelityThresholds()

    orig_data = ensure_rgb(original).tobytes()
    cand_data = ensure_rgb(candidate).tobytes()
    mask_data = (mask if mask.mode == "L" else mask.convert("L")).tobytes()

    sse = 0
    delta_sum = 0  # 亮度均值差 * 3，整数累加
    count = 0

    pixel_total = min(len(mask_data), len(orig_data) // 3, len(cand_data) // 3)
    for i in range(pixel_total):
        if mask_data[i] <= MASK_IN_REGION_LEVEL:
            continue
        p = i * 3
        r0, g0, b0 = orig_data[p], orig_data[p + 1], orig_data[p + 2]
        r1, g1, b1 = cand_data[p], cand_data[p + 1], cand_data[p + 2]
        sse += (r0 - r1) ** 2 + (g0 - g1) ** 2 + (b0 - b1) ** 2
        delta_sum += abs((r0 + g0 + b0) - (r1 + g1 + b1))
        count += 1

    metadata = {"width": mask.width, "height": mask.height}

    if count == 0:
        logger.warning("遮罩内没有商品像素，保真度校验按失败处理")
        return FidelityVerdict.rejected(
            FidelityIssue(IssueCode.EMPTY_MASK, "遮罩内没有商品像素，无法比较"),
            metadata=metadata,
        )

    mse = sse / (count * COLOR_CHANNELS)
    psnr = compute_psnr(mse)
    avg_color_delta = delta_sum / COLOR_CHANNELS / count

    verdict = FidelityVerdict(
        accepted=True,
        mse=mse,
        psnr=psnr,
        avg_color_delta=avg_color_delta,
        pixel_count=count,
        metadata=metadata,
    )

    if psnr < thresholds.min_psnr:
        logger.warning(f"PSNR 低于阈值: {psnr:.2f} < {thresholds.min_psnr}")
        verdict.issues.append(
            FidelityIssue(
                IssueCode.PSNR_TOO_LOW,
                f"PSNR {psnr:.2f} 低于阈值 {thresholds.min_psnr}",
            )
        )
    if mse > thresholds.max_mse:
        logger.warning(f"MSE 高于阈值: {mse:.2f} > {thresholds.max_mse}")
        verdict.issues.append(
            FidelityIssue(
                IssueCode.MSE_TOO_HIGH,
                f"MSE {mse:.2f} 高于阈值 {thresholds.max_mse}",
            )
        )
    if avg_color_delta > thresholds.max_color_delta:
        logger.warning(
            f"色差高于阈值: {avg_color_delta:.2f} > {thresholds.max_color_delta}"
        )
        verdict.issues.append(
            FidelityIssue(
                IssueCode.COLOR_DELTA_TOO_HIGH,
                f"平均色差 {avg_color_delta:.2f} 高于阈值 {thresholds.max_color_delta}",
            )
        )

    verdict.accepted = not verdict.issues
    logger.debug(
        f"保真度指标: mse={mse:.4f}, psnr={psnr:.2f}, "
        f"color_delta={avg_color_delta:.4f}, pixels={count}, "
        f"accepted={verdict.accepted}"
    )
    return verdict


class FidelityChecker:
    """保真度校验器.

    持有一组阈值，对已对齐的图片执行 evaluate。

    Example:
        >>> checker = FidelityChecker(FidelityThresholds(min_psnr=35))
        >>> verdict = checker.evaluate(original, mask, candidate)
    """

    def __init__(self, thresholds: Optional[FidelityThresholds] = None) -> None:
        """初始化校验器.

        Args:
            thresholds: 保真度阈值
        """
        self.thresholds = thresholds or FidelityThresholds()

    def evaluate(
        self,
        original: Image.Image,
        mask: Image.Image,
        candidate: Image.Image,
    ) -> FidelityVerdict:
        """使用当前阈值评估候选图."""
        return evaluate(original, mask, candidate, self.thresholds)
