"""发布前保真度闸门模块.

供编排层在上传前调用：解码输入、对齐尺寸、执行保真度评估，
任何可检测的错误都以失败结论返回，不向调用方抛出。

Features:
    - 支持字节、Data URI、文件路径、PIL Image 输入
    - 失败即拒绝（fail closed）
    - 异步校验与多候选并发筛选
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from functools import partial
from typing import List, Optional, Sequence

from product_fidelity.core.fidelity_checker import (
    FidelityIssue,
    FidelityVerdict,
    IssueCode,
    evaluate,
)
from product_fidelity.core.input_aligner import align_inputs
from product_fidelity.models.app_settings import Settings
from product_fidelity.models.thresholds import FidelityThresholds
from product_fidelity.utils.exceptions import (
    AppException,
    ImageProcessError,
    ShapeMismatchError,
)
from product_fidelity.utils.image_utils import ImageSource, load_image_source
from product_fidelity.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class ScreeningResult:
    """多候选筛选结果.

    Attributes:
        verdicts: 与输入顺序一致的校验结论
    """

    verdicts: List[FidelityVerdict] = field(default_factory=list)

    @property
    def accepted_indices(self) -> List[int]:
        """通过校验的候选序号."""
        return [i for i, v in enumerate(self.verdicts) if v.accepted]

    @property
    def first_accepted(self) -> Optional[int]:
        """第一个通过校验的候选序号，没有则为 None."""
        accepted = self.accepted_indices
        return accepted[0] if accepted else None

    @property
    def all_rejected(self) -> bool:
        """是否全部未通过."""
        return not self.accepted_indices


class FidelityGate:
    """保真度闸门.

    Attributes:
        settings: 应用设置（工作宽度、遮罩处理方式、并发数）
        thresholds: 保真度阈值

    Example:
        >>> gate = FidelityGate()
        >>> verdict = gate.check(original_bytes, mask_data_uri, composite_bytes)
        >>> if verdict.accepted:
        ...     upload(composite_bytes)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        thresholds: Optional[FidelityThresholds] = None,
    ) -> None:
        """初始化闸门.

        Args:
            settings: 应用设置，默认从环境变量加载
            thresholds: 保真度阈值，默认取自 settings
        """
        self.settings = settings or Settings()
        self.thresholds = thresholds or FidelityThresholds.from_settings(
            self.settings
        )

    def check(
        self,
        original: ImageSource,
        mask: ImageSource,
        candidate: ImageSource,
    ) -> FidelityVerdict:
        """校验单个候选图.

        Args:
            original: 原图
            mask: 遮罩源图（白色为商品）
            candidate: 候选图

        Returns:
            保真度校验结论；解码失败、尺寸不一致等情况返回失败结论
        """
        start = time.time()

        try:
            orig_img = load_image_source(original)
            mask_img = load_image_source(mask)
            cand_img = load_image_source(candidate)
        except ImageProcessError as e:
            logger.error(f"保真度校验输入解码失败: {e}")
            return FidelityVerdict.rejected(
                FidelityIssue(IssueCode.DECODE_ERROR, e.message)
            )

        try:
            aligned = align_inputs(orig_img, mask_img, cand_img, self.settings)
        except ShapeMismatchError as e:
            logger.error(f"保真度校验输入无法对齐: {e}")
            return FidelityVerdict.rejected(
                FidelityIssue(IssueCode.SHAPE_MISMATCH, e.message),
                metadata={"sizes": e.sizes},
            )
        except (AppException, OSError, ValueError) as e:
            logger.exception(f"保真度校验预处理出错: {e}")
            return FidelityVerdict.rejected(
                FidelityIssue(IssueCode.CHECK_ERROR, f"校验过程出错: {e}")
            )

        verdict = evaluate(
            aligned.original, aligned.mask, aligned.candidate, self.thresholds
        )
        verdict.metadata["elapsed_ms"] = (time.time() - start) * 1000

        logger.info(
            f"保真度校验完成: {'通过' if verdict.accepted else '未通过'}, "
            f"mse={verdict.mse:.2f}, psnr={verdict.psnr:.2f}, "
            f"color_delta={verdict.avg_color_delta:.2f}"
        )
        return verdict

    async def check_async(
        self,
        original: ImageSource,
        mask: ImageSource,
        candidate: ImageSource,
    ) -> FidelityVerdict:
        """在线程池中执行 check，不阻塞事件循环."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(self.check, original, mask, candidate)
        )

    async def screen_candidates(
        self,
        original: ImageSource,
        mask: ImageSource,
        candidates: Sequence[ImageSource],
        concurrent_limit: Optional[int] = None,
    ) -> ScreeningResult:
        """并发校验多个候选图.

        AI 编辑通常一次产出多张背景，只有通过校验的合成图才应上传。

        Args:
            original: 原图
            mask: 遮罩源图
            candidates: 候选图列表
            concurrent_limit: 并发数，默认取自设置

        Returns:
            筛选结果，结论顺序与 candidates 一致
        """
        if not candidates:
            logger.warning("候选列表为空，无需校验")
            return ScreeningResult()

        semaphore = asyncio.Semaphore(
            concurrent_limit or self.settings.concurrent_limit
        )

        async def _check_one(index: int, candidate: ImageSource) -> FidelityVerdict:
            async with semaphore:
                verdict = await self.check_async(original, mask, candidate)
                verdict.metadata["candidate_index"] = index
                return verdict

        verdicts = await asyncio.gather(
            *(_check_one(i, c) for i, c in enumerate(candidates))
        )
        result = ScreeningResult(verdicts=list(verdicts))

        logger.info(
            f"候选筛选完成: {len(result.accepted_indices)}/{len(candidates)} 通过"
        )
        return result


_fidelity_gate: Optional[FidelityGate] = None


def get_fidelity_gate() -> FidelityGate:
    """获取全局保真度闸门实例.

    设置来自配置管理器。

    Returns:
        FidelityGate 单例
    """
    global _fidelity_gate
    if _fidelity_gate is None:
        from product_fidelity.core.config_manager import get_config

        config = get_config()
        _fidelity_gate = FidelityGate(
            settings=config.settings, thresholds=config.thresholds
        )
    return _fidelity_gate


def reset_fidelity_gate() -> None:
    """重置全局实例，配置重新加载后调用."""
    global _fidelity_gate
    _fidelity_gate = None
