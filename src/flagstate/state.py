"""フラグ評価スナップショットとビルダー"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .exceptions import FlagsStateError, FlagsStateErrorCodes
from .logger import get_logger
from .models import EvaluationDetail, EvaluationReason, FeatureFlag
from .options import FlagsStateOption, FlagsStateOptions

logger = get_logger("state")


@dataclass(frozen=True)
class FlagMetadata:
    """1 フラグ分のメタデータ。"""

    variation: int | None
    reason: EvaluationReason | None
    version: int
    track_events: bool
    debug_events_until_date: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """$flagsState 内の JSON 表現に変換する。None のフィールドは出力しない。"""
        d: dict[str, Any] = {}
        if self.variation is not None:
            d["variation"] = self.variation
        d["version"] = self.version
        d["trackEvents"] = self.track_events
        if self.debug_events_until_date is not None:
            d["debugEventsUntilDate"] = self.debug_events_until_date
        if self.reason is not None:
            d["reason"] = self.reason.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlagMetadata:
        reason = data.get("reason")
        return cls(
            variation=data.get("variation"),
            reason=EvaluationReason.from_dict(reason) if reason is not None else None,
            version=data.get("version", 0),
            track_events=data.get("trackEvents", False),
            debug_events_until_date=data.get("debugEventsUntilDate"),
        )


class FeatureFlagsState:
    """あるユーザーに対する全フラグの評価結果のスナップショット。

    構築後は変更できない。JavaScript クライアントのブートストラップに渡す場合は
    to_values_map() ではなく to_json_dict() / to_json_string() を使うこと。
    """

    def __init__(
        self,
        flag_values: Mapping[str, Any],
        flag_metadata: Mapping[str, FlagMetadata],
        valid: bool = True,
    ) -> None:
        # 呼び出し側の辞書とは共有しない
        self._flag_values: Mapping[str, Any] = MappingProxyType(dict(flag_values))
        self._flag_metadata: Mapping[str, FlagMetadata] = MappingProxyType(dict(flag_metadata))
        self._valid = valid

    @property
    def flag_values(self) -> Mapping[str, Any]:
        return self._flag_values

    @property
    def flag_metadata(self) -> Mapping[str, FlagMetadata]:
        return self._flag_metadata

    def is_valid(self) -> bool:
        """スナップショットが有効か。

        オフラインやユーザー未指定で評価できなかった場合は False。
        """
        return self._valid

    def get_flag_value(self, key: str) -> Any:
        """フラグの評価値を返す。

        フラグが存在しない場合と、デフォルト値に評価された場合はどちらも None。
        """
        return self._flag_values.get(key)

    def get_flag_reason(self, key: str) -> EvaluationReason | None:
        """フラグの評価理由を返す。理由を記録していない場合やフラグがない場合は None。"""
        meta = self._flag_metadata.get(key)
        return None if meta is None else meta.reason

    def to_values_map(self) -> Mapping[str, Any]:
        """フラグキーから評価値への読み取り専用マッピングを返す。"""
        return self._flag_values

    def to_json_dict(self) -> dict[str, Any]:
        """ブートストラップ用 JSON と同じ形の辞書を返す。"""
        from .serialization import to_json_dict

        return to_json_dict(self)

    def to_json_string(self) -> str:
        """ブートストラップ用 JSON 文字列を返す。"""
        from .serialization import dumps

        return dumps(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureFlagsState):
            return NotImplemented
        return (
            dict(self._flag_values) == dict(other._flag_values)
            and dict(self._flag_metadata) == dict(other._flag_metadata)
            and self._valid == other._valid
        )

    # 評価値に dict / list を含みうるためハッシュ不可
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"FeatureFlagsState(flag_values={dict(self._flag_values)!r}, "
            f"valid={self._valid!r})"
        )


class FeatureFlagsStateBuilder:
    """FeatureFlagsState を 1 回の評価パスで組み立てるビルダー。

    build() 後は再利用できない。
    """

    def __init__(self, *options: FlagsStateOption) -> None:
        self._options = FlagsStateOptions.from_options(*options)
        self._flag_values: dict[str, Any] | None = {}
        self._flag_metadata: dict[str, FlagMetadata] | None = {}
        self._valid = True

    @property
    def save_reasons(self) -> bool:
        return self._options.with_reasons

    def valid(self, valid: bool) -> FeatureFlagsStateBuilder:
        """スナップショット全体の有効フラグを設定する。"""
        self._ensure_not_built()
        self._valid = valid
        return self

    def add_flag(self, flag: FeatureFlag, detail: EvaluationDetail) -> FeatureFlagsStateBuilder:
        """1 フラグ分の評価値とメタデータを記録する。同じキーは後勝ち。"""
        values, metadata = self._ensure_not_built()
        values[flag.key] = detail.value
        metadata[flag.key] = FlagMetadata(
            variation=detail.variation_index,
            reason=detail.reason if self.save_reasons else None,
            version=flag.version,
            track_events=flag.track_events,
            debug_events_until_date=flag.debug_events_until_date,
        )
        return self

    def build(self) -> FeatureFlagsState:
        """蓄積した内容を FeatureFlagsState に引き渡す。"""
        values, metadata = self._ensure_not_built()
        self._flag_values = None
        self._flag_metadata = None
        logger.debug("feature flags state built", flag_count=len(values), valid=self._valid)
        return FeatureFlagsState(values, metadata, self._valid)

    def _ensure_not_built(self) -> tuple[dict[str, Any], dict[str, FlagMetadata]]:
        if self._flag_values is None or self._flag_metadata is None:
            raise FlagsStateError(
                code=FlagsStateErrorCodes.BUILDER_CONSUMED,
                message="builder cannot be used after build()",
            )
        return self._flag_values, self._flag_metadata
