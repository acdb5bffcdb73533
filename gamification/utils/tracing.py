import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

# Innermost open span of the current context
trace_context: ContextVar[Optional['TraceSpan']] = ContextVar(
    'trace_context', default=None
)

logger = logging.getLogger(__name__)


@dataclass
class TraceSpan:
    '''A timed unit of engine work with metadata.'''

    name: str
    start_time: float = field(default_factory=time.perf_counter)
    end_time: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent: Optional['TraceSpan'] = None
    children: list['TraceSpan'] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def duration(self) -> Optional[float]:
        return self.end_time - self.start_time if self.end_time else None

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else self.parent.depth + 1

    def finish(self, error: Optional[BaseException] = None) -> None:
        self.end_time = time.perf_counter()
        if error is not None:
            self.error = type(error).__name__

        duration_ms = (self.duration or 0) * 1000
        metadata_str = ', '.join(f'{k}={v}' for k, v in self.metadata.items())
        status = f' failed with {self.error}' if self.error else ''
        logger.debug(
            f'{"  " * self.depth}{self.name}: {duration_ms:.2f}ms{status} '
            f'[{metadata_str}]'
        )


@contextmanager
def trace_span(
    name: str, metadata: Optional[Dict[str, Any]] = None
) -> Iterator[TraceSpan]:
    '''Time a block and nest it under the currently open span.

    Example:
        with trace_span('engine.complete_task', {'player_id': 1}):
            ...
    '''
    parent = trace_context.get()
    span = TraceSpan(name=name, metadata=dict(metadata or {}), parent=parent)
    if parent:
        parent.children.append(span)

    token = trace_context.set(span)
    try:
        yield span
    except BaseException as e:
        span.finish(error=e)
        raise
    else:
        span.finish()
    finally:
        trace_context.reset(token)


def get_current_span() -> Optional[TraceSpan]:
    return trace_context.get()


def add_span_metadata(key: str, value: Any) -> None:
    '''Attach metadata to the innermost open span, if any.'''
    current = trace_context.get()
    if current:
        current.metadata[key] = value
