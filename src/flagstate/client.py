"""評価エンジンからスナップショットを作成する"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .logger import get_logger
from .models import (
    EvaluationContext,
    EvaluationDetail,
    EvaluationErrorKind,
    EvaluationReason,
    FeatureFlag,
)
from .options import FlagsStateOption
from .state import FeatureFlagsState, FeatureFlagsStateBuilder

logger = get_logger("client")


class FlagEvaluator(Protocol):
    """フラグ評価エンジンのプロトコル。"""

    def evaluate(self, flag: FeatureFlag, context: EvaluationContext) -> EvaluationDetail: ...


def all_flags_state(
    flags: Iterable[FeatureFlag],
    evaluator: FlagEvaluator,
    context: EvaluationContext | None,
    *options: FlagsStateOption,
    offline: bool = False,
) -> FeatureFlagsState:
    """全フラグを評価して FeatureFlagsState を返す。

    オフライン時やコンテキストにキーがない場合は無効な空のスナップショットを返す。
    個々のフラグの評価で例外が発生した場合は、値 None と ERROR 理由で記録して続行する。

    Args:
        flags: 評価対象のフラグ定義
        evaluator: フラグ評価エンジン
        context: 評価コンテキスト
        options: スナップショット作成オプション
        offline: オフラインモードか
    """
    builder = FeatureFlagsStateBuilder(*options)
    if offline:
        logger.warning("all_flags_state() called in offline mode; returning empty state")
        return builder.valid(False).build()
    if context is None or context.key is None:
        logger.warning("all_flags_state() called without a context key; returning empty state")
        return builder.valid(False).build()

    for flag in flags:
        try:
            detail = evaluator.evaluate(flag, context)
        except Exception as e:
            logger.error(
                "Failed to evaluate flag for all_flags_state",
                flag_key=flag.key,
                error=str(e),
            )
            detail = EvaluationDetail(
                value=None,
                variation_index=None,
                reason=EvaluationReason.error(EvaluationErrorKind.EXCEPTION),
            )
        builder.add_flag(flag, detail)
    return builder.build()
