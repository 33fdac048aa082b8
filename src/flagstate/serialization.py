"""FeatureFlagsState のブートストラップ用 JSON 形式

出力はフラグキーから評価値への平坦なオブジェクトに、予約キー $flagsState
(フラグごとのメタデータ) と $valid (有効フラグ) を加えたもの。JavaScript
クライアントはルートから直接フラグ値を読むため、この形は変えられない。

予約キーと同名のフラグがあると出力上で衝突する。これは形式上の制約として扱い、
ここでは回避しない。
"""

from __future__ import annotations

import json
from io import StringIO
from typing import IO, Any, Protocol

from .exceptions import FlagsStateError, FlagsStateErrorCodes
from .logger import get_logger
from .state import FeatureFlagsState, FlagMetadata

FLAGS_STATE_KEY = "$flagsState"
VALID_KEY = "$valid"

_SEPARATORS = (",", ":")

logger = get_logger("serialization")


class _TextSink(Protocol):
    """str を書き込めるオブジェクト。"""

    def write(self, s: str, /) -> Any: ...


def _encode(value: Any) -> str:
    try:
        return json.dumps(value, separators=_SEPARATORS, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise FlagsStateError(
            code=FlagsStateErrorCodes.UNSERIALIZABLE_VALUE,
            message=f"value cannot be encoded as JSON: {e}",
            cause=e,
        ) from e


def write(state: FeatureFlagsState, out: _TextSink) -> None:
    """state を JSON としてストリーム出力する。

    マップを走査しながら値ごとに書き込み、文書全体を組み立てることはしない。

    Args:
        state: 出力するスナップショット
        out: write(str) を持つ出力先

    Raises:
        FlagsStateError: NaN / Infinity など JSON にできない値を含む場合
            (UNSERIALIZABLE_VALUE)。それまでに書き込んだ断片は出力先に残る。
    """
    out.write("{")
    for key, value in state.flag_values.items():
        out.write(_encode(key))
        out.write(":")
        out.write(_encode(value))
        out.write(",")

    out.write(_encode(FLAGS_STATE_KEY))
    out.write(":{")
    first = True
    for key, meta in state.flag_metadata.items():
        if not first:
            out.write(",")
        first = False
        out.write(_encode(key))
        out.write(":")
        out.write(_encode(meta.to_dict()))
    out.write("},")

    out.write(_encode(VALID_KEY))
    out.write(":")
    out.write(_encode(state.is_valid()))
    out.write("}")


def dumps(state: FeatureFlagsState) -> str:
    """state を JSON 文字列に変換する。"""
    buf = StringIO()
    write(state, buf)
    return buf.getvalue()


def to_json_dict(state: FeatureFlagsState) -> dict[str, Any]:
    """write() と同じ形の辞書を返す。"""
    result: dict[str, Any] = dict(state.flag_values)
    result[FLAGS_STATE_KEY] = {key: meta.to_dict() for key, meta in state.flag_metadata.items()}
    result[VALID_KEY] = state.is_valid()
    return result


def from_json_dict(data: Any) -> FeatureFlagsState:
    """JSON をデコードした値から FeatureFlagsState を復元する。

    予約キー以外はすべてフラグ値として扱う。メタデータの欠けたフィールドは
    エラーにせず None またはデフォルト値になる。

    Raises:
        FlagsStateError: 構造が解釈できない場合 (MALFORMED_PAYLOAD)
    """
    if not isinstance(data, dict):
        raise _malformed(f"expected a JSON object, got {type(data).__name__}")

    flag_values: dict[str, Any] = {}
    flag_metadata: dict[str, FlagMetadata] = {}
    valid = True
    for name, value in data.items():
        if name == FLAGS_STATE_KEY:
            if not isinstance(value, dict):
                raise _malformed(f"{FLAGS_STATE_KEY} must be an object")
            for key, meta in value.items():
                flag_metadata[key] = _read_metadata(key, meta)
        elif name == VALID_KEY:
            if not isinstance(value, bool):
                raise _malformed(f"{VALID_KEY} must be a boolean")
            valid = value
        else:
            flag_values[name] = value

    logger.debug("feature flags state read", flag_count=len(flag_values), valid=valid)
    return FeatureFlagsState(flag_values, flag_metadata, valid)


def loads(text: str | bytes) -> FeatureFlagsState:
    """JSON 文字列から FeatureFlagsState を復元する。"""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise _malformed(f"invalid JSON: {e}", cause=e) from e
    return from_json_dict(data)


def read(fp: IO[str]) -> FeatureFlagsState:
    """ファイルオブジェクトから FeatureFlagsState を復元する。"""
    try:
        data = json.load(fp)
    except ValueError as e:
        raise _malformed(f"invalid JSON: {e}", cause=e) from e
    return from_json_dict(data)


def _read_metadata(key: str, data: Any) -> FlagMetadata:
    if not isinstance(data, dict):
        raise _malformed(f"metadata for flag {key!r} must be an object")
    try:
        return FlagMetadata.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise _malformed(f"invalid metadata for flag {key!r}: {e}", cause=e) from e


def _malformed(message: str, cause: Exception | None = None) -> FlagsStateError:
    return FlagsStateError(
        code=FlagsStateErrorCodes.MALFORMED_PAYLOAD,
        message=message,
        cause=cause,
    )
