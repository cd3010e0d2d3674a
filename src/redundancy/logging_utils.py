from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

LOGGER_NAME = "redundancy"

# Stages in the order one engine run emits them.
PIPELINE_STAGES = (
    "redundancy_start",
    "eligibility",
    "clustering",
    "pairwise",
    "aggregation",
    "paragraphs",
    "redundancy_finish",
)


@dataclass(slots=True)
class LogSettings:
    path: Path
    level: int = logging.INFO
    max_bytes: int = 5_000_000
    backup_count: int = 5

    @classmethod
    def from_env(cls) -> "LogSettings":
        path = os.getenv("REDUNDANCY_LOG_PATH", "").strip() or "logs/redundancy.log"
        level_name = os.getenv("REDUNDANCY_LOG_LEVEL", "").strip().upper() or "INFO"
        level = logging.getLevelName(level_name)
        return cls(
            path=Path(path),
            level=level if isinstance(level, int) else logging.INFO,
            max_bytes=int(os.getenv("REDUNDANCY_LOG_MAX_BYTES", "5000000")),
            backup_count=int(os.getenv("REDUNDANCY_LOG_BACKUP_COUNT", "5")),
        )


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per line: run id, stage, message and the stage's counters."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "run_id": getattr(record, "run_id", ""),
            "stage": getattr(record, "stage", ""),
            "message": record.getMessage(),
        }
        counters = getattr(record, "extra_fields", None)
        if isinstance(counters, dict):
            payload.update(counters)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=_json_default)


class RunLogger(logging.LoggerAdapter):
    """Logger for one engine run.

    Every record carries the run id. Stages wrapped in :meth:`timed` have
    their wall time kept so :meth:`summary` can report it at the end.
    """

    def __init__(self, logger: logging.Logger, run_id: str) -> None:
        super().__init__(logger, {"run_id": run_id})
        self.stage_ms: dict[str, float] = {}

    @property
    def run_id(self) -> str:
        return self.extra["run_id"]

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        merged = dict(self.extra)
        event_extra = kwargs.get("extra")
        if isinstance(event_extra, dict):
            merged.update(event_extra)
        kwargs["extra"] = merged
        return msg, kwargs

    def event(self, stage: str, message: str, *, level: int = logging.INFO, **fields: Any) -> None:
        self.log(level, message, extra={"stage": stage, "extra_fields": fields})

    @contextmanager
    def timed(self, stage: str, message: str, **fields: Any) -> Iterator[dict[str, Any]]:
        """Emit ``stage`` after the block with ``elapsed_ms``.

        Counters written into the yielded dict inside the block go out with it.
        """
        started = time.perf_counter()
        counters = dict(fields)
        yield counters
        elapsed = round((time.perf_counter() - started) * 1000, 2)
        self.stage_ms[stage] = elapsed
        self.event(stage, message, elapsed_ms=elapsed, **counters)

    def summary(self, **counts: Any) -> dict[str, Any]:
        return {
            **counts,
            "stage_ms": dict(self.stage_ms),
            "total_ms": round(sum(self.stage_ms.values()), 2),
        }


def setup_logging(settings: LogSettings | None = None, *, force: bool = False) -> logging.Logger:
    settings = settings or LogSettings.from_env()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.level)
    logger.propagate = False

    if force:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

    if logger.handlers:
        return logger

    settings.path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        settings.path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger


def get_run_logger(run_id: str, base: logging.Logger | None = None) -> RunLogger:
    return RunLogger(base or logging.getLogger(LOGGER_NAME), run_id)
