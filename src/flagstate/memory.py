"""InMemoryFlagEvaluator 実装"""

from __future__ import annotations

from .models import (
    EvaluationContext,
    EvaluationDetail,
    EvaluationErrorKind,
    EvaluationReason,
    FeatureFlag,
)


class InMemoryFlagEvaluator:
    """評価結果をあらかじめ設定しておくテスト用インメモリ評価器。"""

    def __init__(self) -> None:
        self._flags: dict[str, FeatureFlag] = {}
        self._details: dict[str, EvaluationDetail] = {}

    def set_flag(self, flag: FeatureFlag, detail: EvaluationDetail) -> None:
        """フラグとその評価結果を設定する。"""
        self._flags[flag.key] = flag
        self._details[flag.key] = detail

    def flags(self) -> list[FeatureFlag]:
        """設定済みのフラグを登録順に返す。"""
        return list(self._flags.values())

    def evaluate(self, flag: FeatureFlag, context: EvaluationContext) -> EvaluationDetail:
        detail = self._details.get(flag.key)
        if detail is None:
            return EvaluationDetail(
                value=None,
                variation_index=None,
                reason=EvaluationReason.error(EvaluationErrorKind.FLAG_NOT_FOUND),
            )
        return detail
