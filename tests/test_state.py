"""FeatureFlagsState / FeatureFlagsStateBuilder のユニットテスト"""

import pytest
from flagstate import (
    EvaluationDetail,
    EvaluationReason,
    FeatureFlag,
    FeatureFlagsState,
    FeatureFlagsStateBuilder,
    FlagMetadata,
    FlagsStateError,
    FlagsStateErrorCodes,
    FlagsStateOption,
)


def make_flag(key: str, version: int = 1, track_events: bool = False) -> FeatureFlag:
    return FeatureFlag(key=key, version=version, track_events=track_events)


def test_can_get_flag_value() -> None:
    """フラグの評価値が取得できること。"""
    flag = make_flag("key")
    state = (
        FeatureFlagsStateBuilder()
        .add_flag(flag, EvaluationDetail("value", 1, EvaluationReason.off()))
        .build()
    )
    assert state.get_flag_value("key") == "value"


def test_unknown_flag_returns_none_for_value() -> None:
    """存在しないフラグの値は None。"""
    state = FeatureFlagsStateBuilder().build()
    assert state.get_flag_value("key") is None


def test_default_value_is_none() -> None:
    """デフォルト値に評価されたフラグの値は None。"""
    flag = make_flag("key")
    detail = EvaluationDetail(None, None, EvaluationReason.fallthrough())
    state = FeatureFlagsStateBuilder().add_flag(flag, detail).build()
    assert detail.is_default_value is True
    assert state.get_flag_value("key") is None
    assert state.flag_metadata["key"].variation is None


def test_can_get_flag_reason() -> None:
    """WITH_REASONS 指定時は評価理由が取得できること。"""
    flag = make_flag("key")
    reason = EvaluationReason.rule_match(0, "rule-id")
    state = (
        FeatureFlagsStateBuilder(FlagsStateOption.WITH_REASONS)
        .add_flag(flag, EvaluationDetail("value", 1, reason))
        .build()
    )
    assert state.get_flag_reason("key") == reason


def test_unknown_flag_returns_none_for_reason() -> None:
    """存在しないフラグの評価理由は None。"""
    state = FeatureFlagsStateBuilder(FlagsStateOption.WITH_REASONS).build()
    assert state.get_flag_reason("key") is None


def test_reason_is_none_if_reasons_were_not_recorded() -> None:
    """WITH_REASONS なしでは評価理由を保存しないこと。"""
    flag = make_flag("key")
    state = (
        FeatureFlagsStateBuilder()
        .add_flag(flag, EvaluationDetail("value", 1, EvaluationReason.off()))
        .build()
    )
    assert state.get_flag_reason("key") is None
    assert state.flag_metadata["key"].reason is None


def test_flag_can_have_null_value() -> None:
    """評価値 None のフラグも記録されること。"""
    flag = make_flag("key")
    state = FeatureFlagsStateBuilder().add_flag(flag, EvaluationDetail(None, 1, None)).build()
    assert state.get_flag_value("key") is None
    assert "key" in state.to_values_map()


def test_can_convert_to_values_map() -> None:
    """to_values_map がキーと評価値のマッピングを返すこと。"""
    state = (
        FeatureFlagsStateBuilder()
        .add_flag(make_flag("key1", 100), EvaluationDetail("value1", 0, None))
        .add_flag(make_flag("key2", 200), EvaluationDetail("value2", 1, None))
        .build()
    )
    assert dict(state.to_values_map()) == {"key1": "value1", "key2": "value2"}


def test_value_and_metadata_keys_match_added_flags() -> None:
    """値とメタデータのキー集合が追加したフラグのキーと一致すること。"""
    keys = ["a", "b", "c", "d"]
    builder = FeatureFlagsStateBuilder()
    for i, key in enumerate(keys):
        builder.add_flag(make_flag(key, i), EvaluationDetail(i, i, None))
    state = builder.build()
    assert set(state.flag_values) == set(keys)
    assert set(state.flag_metadata) == set(keys)


def test_metadata_is_derived_from_flag_and_detail() -> None:
    """メタデータがフラグ定義と評価結果から作られること。"""
    flag = FeatureFlag(key="key", version=7, track_events=True, debug_events_until_date=1000)
    state = FeatureFlagsStateBuilder().add_flag(flag, EvaluationDetail(True, 2, None)).build()
    assert state.flag_metadata["key"] == FlagMetadata(
        variation=2,
        reason=None,
        version=7,
        track_events=True,
        debug_events_until_date=1000,
    )


def test_add_flag_twice_keeps_last() -> None:
    """同じキーで 2 回追加すると後の内容が残ること。"""
    state = (
        FeatureFlagsStateBuilder()
        .add_flag(make_flag("key", 1), EvaluationDetail("first", 0, None))
        .add_flag(make_flag("key", 2), EvaluationDetail("second", 1, None))
        .build()
    )
    assert state.get_flag_value("key") == "second"
    assert state.flag_metadata["key"].version == 2
    assert state.flag_metadata["key"].variation == 1
    assert len(state.flag_values) == 1


def test_builder_is_valid_by_default() -> None:
    """デフォルトでは有効なスナップショットになること。"""
    assert FeatureFlagsStateBuilder().build().is_valid() is True


def test_invalid_empty_state() -> None:
    """valid(False) で空の無効スナップショットになること。"""
    state = FeatureFlagsStateBuilder().valid(False).build()
    assert state.is_valid() is False
    assert len(state.flag_values) == 0
    assert len(state.flag_metadata) == 0


def test_values_map_is_read_only() -> None:
    """公開マッピング経由でスナップショットを変更できないこと。"""
    state = FeatureFlagsStateBuilder().add_flag(make_flag("key"), EvaluationDetail(1, 0, None)).build()
    values = state.to_values_map()
    with pytest.raises(TypeError):
        values["other"] = 2  # type: ignore[index]
    with pytest.raises(TypeError):
        del values["key"]  # type: ignore[attr-defined]
    with pytest.raises(TypeError):
        state.flag_metadata["key"] = None  # type: ignore[index]
    assert dict(state.to_values_map()) == {"key": 1}


def test_copy_of_values_map_does_not_affect_state() -> None:
    """取得したマッピングのコピーを変更してもスナップショットは変わらないこと。"""
    state = FeatureFlagsStateBuilder().add_flag(make_flag("key"), EvaluationDetail(1, 0, None)).build()
    copied = dict(state.to_values_map())
    copied["key"] = 99
    assert state.get_flag_value("key") == 1


def test_builder_cannot_be_used_after_build() -> None:
    """build() 後のビルダー操作は BUILDER_CONSUMED エラー。"""
    builder = FeatureFlagsStateBuilder()
    state = builder.build()
    with pytest.raises(FlagsStateError) as exc_info:
        builder.add_flag(make_flag("key"), EvaluationDetail(1, 0, None))
    assert exc_info.value.code == FlagsStateErrorCodes.BUILDER_CONSUMED
    with pytest.raises(FlagsStateError):
        builder.valid(False)
    with pytest.raises(FlagsStateError):
        builder.build()
    assert state.get_flag_value("key") is None


def test_save_reasons_property() -> None:
    """save_reasons がオプションを反映すること。"""
    assert FeatureFlagsStateBuilder().save_reasons is False
    assert FeatureFlagsStateBuilder(FlagsStateOption.WITH_REASONS).save_reasons is True


def test_equality() -> None:
    """値・メタデータ・有効フラグがすべて等しければ等価。"""
    flag1 = make_flag("key1")
    flag2 = make_flag("key2")
    state1 = (
        FeatureFlagsStateBuilder()
        .add_flag(flag1, EvaluationDetail("a", 0, None))
        .add_flag(flag2, EvaluationDetail("b", 1, None))
        .build()
    )
    state2 = (
        FeatureFlagsStateBuilder()
        .add_flag(flag2, EvaluationDetail("b", 1, None))
        .add_flag(flag1, EvaluationDetail("a", 0, None))
        .build()
    )
    assert state1 == state2


def test_inequality() -> None:
    """値・メタデータ・有効フラグのいずれかが異なれば非等価。"""
    flag = make_flag("key")
    base = FeatureFlagsStateBuilder().add_flag(flag, EvaluationDetail("a", 0, None)).build()
    other_value = FeatureFlagsStateBuilder().add_flag(flag, EvaluationDetail("b", 0, None)).build()
    other_meta = FeatureFlagsStateBuilder().add_flag(flag, EvaluationDetail("a", 1, None)).build()
    invalid = (
        FeatureFlagsStateBuilder().valid(False).add_flag(flag, EvaluationDetail("a", 0, None)).build()
    )
    assert base != other_value
    assert base != other_meta
    assert base != invalid
    assert base != "not a state"


def test_state_is_not_hashable() -> None:
    """FeatureFlagsState はハッシュ不可。"""
    with pytest.raises(TypeError):
        hash(FeatureFlagsState({}, {}, True))


def test_flag_metadata_equality_includes_reason() -> None:
    """FlagMetadata の等価性は reason を含む全フィールドで判定されること。"""
    a = FlagMetadata(1, EvaluationReason.off(), 2, True, None)
    b = FlagMetadata(1, EvaluationReason.off(), 2, True, None)
    c = FlagMetadata(1, EvaluationReason.fallthrough(), 2, True, None)
    assert a == b
    assert hash(a) == hash(b)
    assert a != c


def test_flag_metadata_to_dict_omits_none() -> None:
    """None のフィールドは出力しないこと。"""
    meta = FlagMetadata(variation=None, reason=None, version=3, track_events=False)
    assert meta.to_dict() == {"version": 3, "trackEvents": False}


def test_flag_metadata_from_dict_defaults() -> None:
    """欠けたフィールドはデフォルト値になること。"""
    meta = FlagMetadata.from_dict({})
    assert meta == FlagMetadata(None, None, 0, False, None)


def test_constructor_does_not_share_input_dicts() -> None:
    """コンストラクタに渡した辞書を後から変更してもスナップショットは変わらないこと。"""
    values = {"a": 1}
    metadata = {"a": FlagMetadata(0, None, 1, False)}
    state = FeatureFlagsState(values, metadata, True)
    values["b"] = 2
    del metadata["a"]
    assert dict(state.flag_values) == {"a": 1}
    assert set(state.flag_metadata) == {"a"}
