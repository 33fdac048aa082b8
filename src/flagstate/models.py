"""フラグ評価の入力データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EvaluationReasonKind(StrEnum):
    """評価理由の種別。"""

    OFF = "OFF"
    FALLTHROUGH = "FALLTHROUGH"
    TARGET_MATCH = "TARGET_MATCH"
    RULE_MATCH = "RULE_MATCH"
    PREREQUISITE_FAILED = "PREREQUISITE_FAILED"
    ERROR = "ERROR"


class EvaluationErrorKind(StrEnum):
    """評価エラーの種別。"""

    CLIENT_NOT_READY = "CLIENT_NOT_READY"
    FLAG_NOT_FOUND = "FLAG_NOT_FOUND"
    MALFORMED_FLAG = "MALFORMED_FLAG"
    USER_NOT_SPECIFIED = "USER_NOT_SPECIFIED"
    WRONG_TYPE = "WRONG_TYPE"
    EXCEPTION = "EXCEPTION"


@dataclass(frozen=True)
class EvaluationReason:
    """バリエーションが選ばれた理由。

    kind 以外のフィールドは種別ごとに意味を持ち、該当しない場合は None。
    """

    kind: EvaluationReasonKind
    rule_index: int | None = None
    rule_id: str | None = None
    prerequisite_key: str | None = None
    error_kind: EvaluationErrorKind | None = None

    @classmethod
    def off(cls) -> EvaluationReason:
        return cls(kind=EvaluationReasonKind.OFF)

    @classmethod
    def fallthrough(cls) -> EvaluationReason:
        return cls(kind=EvaluationReasonKind.FALLTHROUGH)

    @classmethod
    def target_match(cls) -> EvaluationReason:
        return cls(kind=EvaluationReasonKind.TARGET_MATCH)

    @classmethod
    def rule_match(cls, rule_index: int, rule_id: str | None = None) -> EvaluationReason:
        return cls(
            kind=EvaluationReasonKind.RULE_MATCH,
            rule_index=rule_index,
            rule_id=rule_id,
        )

    @classmethod
    def prerequisite_failed(cls, prerequisite_key: str) -> EvaluationReason:
        return cls(
            kind=EvaluationReasonKind.PREREQUISITE_FAILED,
            prerequisite_key=prerequisite_key,
        )

    @classmethod
    def error(cls, error_kind: EvaluationErrorKind) -> EvaluationReason:
        return cls(kind=EvaluationReasonKind.ERROR, error_kind=error_kind)

    def to_dict(self) -> dict[str, Any]:
        """JSON 表現に変換する。None のフィールドは出力しない。"""
        d: dict[str, Any] = {"kind": self.kind.value}
        if self.rule_index is not None:
            d["ruleIndex"] = self.rule_index
        if self.rule_id is not None:
            d["ruleId"] = self.rule_id
        if self.prerequisite_key is not None:
            d["prerequisiteKey"] = self.prerequisite_key
        if self.error_kind is not None:
            d["errorKind"] = self.error_kind.value
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvaluationReason:
        error_kind = data.get("errorKind")
        return cls(
            kind=EvaluationReasonKind(data["kind"]),
            rule_index=data.get("ruleIndex"),
            rule_id=data.get("ruleId"),
            prerequisite_key=data.get("prerequisiteKey"),
            error_kind=EvaluationErrorKind(error_kind) if error_kind is not None else None,
        )


@dataclass(frozen=True)
class FeatureFlag:
    """スナップショット作成に必要なフラグ定義の属性。"""

    key: str
    version: int = 0
    track_events: bool = False
    debug_events_until_date: int | None = None  # epoch ミリ秒

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeatureFlag:
        """フラグ管理サービスの JSON 表現から FeatureFlag を生成する。"""
        return cls(
            key=data["key"],
            version=data.get("version", 0),
            track_events=data.get("trackEvents", False),
            debug_events_until_date=data.get("debugEventsUntilDate"),
        )


@dataclass(frozen=True)
class EvaluationDetail:
    """1 フラグの評価結果。"""

    value: Any
    variation_index: int | None = None
    reason: EvaluationReason | None = None

    @property
    def is_default_value(self) -> bool:
        """バリエーションが選ばれずデフォルト値にフォールバックしたか。"""
        return self.variation_index is None


@dataclass
class EvaluationContext:
    """フラグ評価コンテキスト。"""

    key: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
