"""Request-scoped log context and stage timings for uploads."""

import dataclasses
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass, field

from .logging_config import get_logger


def new_request_id() -> str:
    """Short identifier used to correlate the log lines of one upload."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class LogContext:
    """
    What a log line is about: which request, which pipeline stage, and any
    request fields (filename, key, error type) gathered so far.
    """

    request_id: str = field(default_factory=new_request_id)
    stage: str = ""
    component: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)

    def for_stage(self, stage: str) -> "LogContext":
        return dataclasses.replace(self, stage=stage)

    def bind(self, **fields: Any) -> "LogContext":
        """Return a copy carrying additional fields."""
        return dataclasses.replace(self, fields={**self.fields, **fields})


def render(message: str, context: Optional[LogContext], extra: Dict[str, Any]) -> str:
    """
    Format ``[request_id] stage: message key=value ...``.

    Fields from the context come first; ``extra`` wins on name clashes.
    """
    values = dict(context.fields) if context else {}
    values.update(extra)

    parts = []
    if context:
        parts.append(f"[{context.request_id}]")
        if context.stage:
            parts.append(f"{context.stage}:")
    parts.append(message)
    parts.extend(f"{name}={value}" for name, value in values.items())
    return " ".join(parts)


class StructuredLogger:
    """Logger that renders a LogContext into each line."""

    def __init__(self, name: str, level: Optional[int] = None):
        self._logger = get_logger(name)
        if level is not None:
            self._logger.setLevel(level)

    def _log(
        self,
        level: int,
        message: str,
        context: Optional[LogContext] = None,
        exc_info: bool = False,
        **extra: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, render(message, context, extra), exc_info=exc_info)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.ERROR, message, context, **kwargs)


@dataclass
class StageTiming:
    """How long one pipeline stage took and whether it finished."""

    stage: str
    started: float
    finished: float
    success: bool
    error: Optional[str] = None

    @property
    def duration_ms(self) -> float:
        return (self.finished - self.started) * 1000


class MetricsCollector:
    """Per-request collector of stage timings."""

    def __init__(self):
        self._timings: List[StageTiming] = []

    @contextmanager
    def measure(self, stage: str) -> Iterator[None]:
        """Time the enclosed block and record it, failed or not."""
        started = time.perf_counter()
        error = None
        try:
            yield
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            raise
        finally:
            self._timings.append(
                StageTiming(
                    stage=stage,
                    started=started,
                    finished=time.perf_counter(),
                    success=error is None,
                    error=error,
                )
            )

    def timings(self, stage: Optional[str] = None) -> List[StageTiming]:
        if stage:
            return [t for t in self._timings if t.stage == stage]
        return list(self._timings)

    def summary(self) -> Dict[str, Any]:
        """Total and per-stage durations in milliseconds, rounded to 0.01."""
        return {
            "duration_ms": round(sum(t.duration_ms for t in self._timings), 2),
            "stages_ms": {t.stage: round(t.duration_ms, 2) for t in self._timings},
            "failed": [t.stage for t in self._timings if not t.success],
        }
