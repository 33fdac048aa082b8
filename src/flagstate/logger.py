"""flagstate のログ出力設定

ライブラリ内の各モジュールは get_logger() でロガーを取得する。出力されるイベントには
library と component が付与される。出力形式の設定は利用側が configure_logging() で行う。
"""

from __future__ import annotations

import logging
import sys

import structlog

from .config import LogSettings

LIBRARY_NAME = "flagstate"


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """モジュール用のロガーを返す。

    遅延プロキシを返すため、import 時に取得しても後の configure_logging() が反映される。
    """
    return structlog.stdlib.get_logger(LIBRARY_NAME, library=LIBRARY_NAME, component=component)


def configure_logging(settings: LogSettings | None = None) -> None:
    """flagstate のログ出力を設定する。

    レベルは "flagstate" の標準ロガーにだけ適用し、アプリケーション側のロガーには触れない。
    """
    settings = settings or LogSettings()
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger(LIBRARY_NAME).setLevel(
        getattr(logging, settings.level.upper(), logging.INFO)
    )

    renderer: structlog.types.Processor
    if settings.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
