from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from .config import LoggingCfg


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def setup_json_logging(
    log_dir: str | None = None, level: str = "INFO", *, json: bool = True
) -> structlog.stdlib.BoundLogger:
    """Configure structlog to emit log records away from the protocol sink.

    With ``log_dir`` records go to ``log_dir/i3bar.ndjson``, otherwise to
    stderr. stdout is left alone since the bar host reads the protocol there.
    """

    handler: logging.Handler
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path / "i3bar.ndjson", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ],
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    structlog.configure(
        processors=_build_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger("i3bar")


def setup_logging(cfg: LoggingCfg) -> structlog.stdlib.BoundLogger:
    log_dir = str(cfg.log_dir) if cfg.log_dir is not None else None
    return setup_json_logging(log_dir, cfg.level, json=cfg.json)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger backed by the stdlib logger ``name``.

    Records reach only stdlib handlers, never structlog's default stdout
    printer, even before ``setup_json_logging`` runs.
    """

    return cast(structlog.stdlib.BoundLogger, structlog.wrap_logger(logging.getLogger(name)))
