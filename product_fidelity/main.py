"""商品图片保真度校验工具 - 命令行入口."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from product_fidelity.utils.constants import APP_NAME, APP_VERSION

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器."""
    parser = argparse.ArgumentParser(
        prog="fidelity-check",
        description=f"{APP_NAME}：判断 AI 编辑后的商品图是否保留了商品原貌",
    )
    parser.add_argument("original", help="原图路径")
    parser.add_argument("mask", help="商品遮罩路径（白色为商品）")
    parser.add_argument("candidates", nargs="+", help="一个或多个候选图路径")
    parser.add_argument("--min-psnr", type=float, default=None, help="最低 PSNR")
    parser.add_argument("--max-mse", type=float, default=None, help="最高 MSE")
    parser.add_argument(
        "--max-color-delta", type=float, default=None, help="最高平均色差"
    )
    parser.add_argument("--json", action="store_true", help="以 JSON 输出结果")
    parser.add_argument("--log-file", action="store_true", help="同时写入日志文件")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {APP_VERSION}"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """命令行主入口函数.

    Returns:
        退出码：0 至少一个候选通过，1 全部未通过，2 配置或参数错误
    """
    from pydantic import ValidationError

    from product_fidelity.core.config_manager import get_config
    from product_fidelity.core.fidelity_gate import FidelityGate
    from product_fidelity.utils.error_handler import get_user_friendly_message
    from product_fidelity.utils.exceptions import AppException
    from product_fidelity.utils.logger import (
        enable_file_logging,
        set_log_level,
        setup_logger,
    )

    args = build_parser().parse_args(argv)
    logger = setup_logger(__name__)

    try:
        config = get_config()
        settings = config.settings
        thresholds = config.thresholds.with_overrides(
            min_psnr=args.min_psnr,
            max_mse=args.max_mse,
            max_color_delta=args.max_color_delta,
        )
    except (AppException, ValidationError) as e:
        print(f"{get_user_friendly_message(e)}: {e}", file=sys.stderr)
        return EXIT_ERROR

    set_log_level(settings.log_level)
    if args.log_file:
        enable_file_logging()

    gate = FidelityGate(settings=settings, thresholds=thresholds)
    result = asyncio.run(
        gate.screen_candidates(args.original, args.mask, args.candidates)
    )

    if args.json:
        payload = {
            "thresholds": thresholds.model_dump(),
            "candidates": [
                {"path": path, **verdict.to_dict()}
                for path, verdict in zip(args.candidates, result.verdicts)
            ],
            "accepted": result.accepted_indices,
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for path, verdict in zip(args.candidates, result.verdicts):
            status = "ACCEPT" if verdict.accepted else "REJECT"
            line = (
                f"{status}  {path}  mse={verdict.mse:.2f} "
                f"psnr={verdict.psnr:.2f} color_delta={verdict.avg_color_delta:.2f}"
            )
            if verdict.issues:
                line += "  [" + ", ".join(verdict.issue_codes) + "]"
            print(line)

    logger.debug(f"校验结束，通过序号: {result.accepted_indices}")
    return EXIT_REJECTED if result.all_rejected else EXIT_ACCEPTED


if __name__ == "__main__":
    sys.exit(main())
