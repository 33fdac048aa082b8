"""スナップショット作成オプション"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FlagsStateOption(StrEnum):
    """FeatureFlagsStateBuilder に渡すオプション。"""

    WITH_REASONS = "WITH_REASONS"

    @staticmethod
    def has_option(options: tuple[FlagsStateOption, ...], option: FlagsStateOption) -> bool:
        return option in options


@dataclass(frozen=True)
class FlagsStateOptions:
    """可変長オプションを解決した設定値。"""

    with_reasons: bool = False

    @classmethod
    def from_options(cls, *options: FlagsStateOption) -> FlagsStateOptions:
        return cls(
            with_reasons=FlagsStateOption.has_option(options, FlagsStateOption.WITH_REASONS),
        )
