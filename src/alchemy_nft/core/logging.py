from __future__ import annotations

import logging
import sys
from typing import Any, Union

import structlog

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.dev.ConsoleRenderer(colors=False),
]


def get_logger(name: str) -> Any:
    """取得經由標準 logging 輸出的 structlog logger。

    未呼叫 configure_logging 時沿用宿主程式的 logging 設定，
    不會直接寫入 stdout。
    """

    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """設定結構化日誌格式。"""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # stdout 保留給 CLI 的 JSON 輸出
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("alchemy_nft").setLevel(level)
    structlog.configure(
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
