"""核心业务逻辑模块."""

from product_fidelity.core.fidelity_checker import (
    MAX_FINITE_PSNR,
    FidelityChecker,
    FidelityIssue,
    FidelityVerdict,
    IssueCode,
    compute_psnr,
    evaluate,
)
from product_fidelity.core.fidelity_gate import (
    FidelityGate,
    ScreeningResult,
    get_fidelity_gate,
)
from product_fidelity.core.input_aligner import (
    AlignedInputs,
    align_inputs,
    build_mask,
    resize_to_width,
)

__all__ = [
    # 保真度校验
    "MAX_FINITE_PSNR",
    "FidelityChecker",
    "FidelityIssue",
    "FidelityVerdict",
    "IssueCode",
    "compute_psnr",
    "evaluate",
    # 输入对齐
    "AlignedInputs",
    "align_inputs",
    "build_mask",
    "resize_to_width",
    # 闸门
    "FidelityGate",
    "ScreeningResult",
    "get_fidelity_gate",
]
