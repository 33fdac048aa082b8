"""設定型定義と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import FlagsStateError, FlagsStateErrorCodes
from .options import FlagsStateOption


class LogSettings(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class FlagsStateSettings(BaseModel):
    """スナップショット作成の設定。"""

    with_reasons: bool = False
    log: LogSettings = Field(default_factory=LogSettings)

    def options(self) -> tuple[FlagsStateOption, ...]:
        """FeatureFlagsStateBuilder に渡すオプションを返す。"""
        if self.with_reasons:
            return (FlagsStateOption.WITH_REASONS,)
        return ()


def load(path: Path, section: str | None = None) -> FlagsStateSettings:
    """YAML 設定ファイルから FlagsStateSettings を読み込む。

    section を指定した場合は、アプリケーション全体の設定ファイルのうち
    そのキー配下だけを使う。空ファイルやセクションがない場合はデフォルト設定。

    Raises:
        FlagsStateError: 読み込み・YAML 解析・検証に失敗した場合
    """
    try:
        with path.open(encoding="utf-8") as fp:
            document: Any = yaml.safe_load(fp)
    except OSError as e:
        raise FlagsStateError(
            code=FlagsStateErrorCodes.READ_FILE,
            message=f"Failed to read flagstate settings: {path}",
            cause=e,
        ) from e
    except yaml.YAMLError as e:
        raise FlagsStateError(
            code=FlagsStateErrorCodes.PARSE_YAML,
            message=f"Invalid YAML in flagstate settings: {path}",
            cause=e,
        ) from e

    if section is not None and isinstance(document, dict):
        document = document.get(section)
    if document is None:
        return FlagsStateSettings()
    if not isinstance(document, dict):
        raise FlagsStateError(
            code=FlagsStateErrorCodes.VALIDATION,
            message=f"flagstate settings must be a mapping, got {type(document).__name__}",
        )
    try:
        return FlagsStateSettings.model_validate(document)
    except ValidationError as e:
        raise FlagsStateError(
            code=FlagsStateErrorCodes.VALIDATION,
            message=f"Invalid flagstate settings: {e}",
            cause=e,
        ) from e
