"""
Fluentd Logging Handler
=======================

Bounded Context: Host Logging Integration

A logging.Handler that ships every LogRecord to a Fluentd collector.

Record Layout:
    {
        "level": "INFO",
        "message": "<formatted message>",
        "logger_name": "app.web",
        "sequence_id": 42,
        "stacktrace": [                      # emit_stack_trace + exc_info only
            {"filename": ..., "line": ..., "column": ..., "method": ..., "code": ...}
        ]
    }

Design:
- logging.Handler.handle() holds the handler lock around emit(), which
  serializes access to the (non thread-safe) publisher
- Failures go to logging.Handler.handleError(), the host framework's policy
- Records from the library's own loggers are skipped (no feedback loop)

Example:
    >>> import logging
    >>> from fluentd_forward import FluentdHandler, FluentdConfig
    >>> handler = FluentdHandler(FluentdConfig(tag="app.web", emit_stack_trace=True))
    >>> logging.getLogger("app").addHandler(handler)
"""

import itertools
import logging
import traceback
from types import TracebackType
from typing import Any, Dict, List, Optional

from .config import FluentdConfig
from .logging import LOGGER_NAMESPACE
from .publishers import FluentdPublisher


def transcode_traceback(tb: Optional[TracebackType]) -> List[Dict[str, Any]]:
    """Project a traceback into a list of frame maps, outermost first."""
    frames = []
    for frame in traceback.extract_tb(tb):
        frames.append({
            'filename': frame.filename,
            'line': frame.lineno,
            # colno exists on Python 3.11+
            'column': getattr(frame, 'colno', None),
            'method': frame.name,
            'code': frame.line,
        })
    return frames


class FluentdHandler(logging.Handler):
    """
    Logging handler forwarding records to Fluentd.

    Attributes:
        config: Target configuration
        publisher: Publisher used for every record
    """

    def __init__(
        self,
        config: Optional[FluentdConfig] = None,
        publisher: Optional[FluentdPublisher] = None,
        level: int = logging.NOTSET,
    ):
        super().__init__(level=level)
        self.config = config or (publisher.config if publisher else FluentdConfig())
        self.publisher = publisher or FluentdPublisher(self.config)
        self._sequence = itertools.count(1)

    def build_record(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Project a LogRecord into the Fluentd record map."""
        data = {
            'level': record.levelname,
            'message': self.format(record),
            'logger_name': record.name,
            'sequence_id': next(self._sequence),
        }
        if self.config.emit_stack_trace and record.exc_info and record.exc_info[2] is not None:
            data['stacktrace'] = transcode_traceback(record.exc_info[2])
        return data

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == LOGGER_NAMESPACE or record.name.startswith(LOGGER_NAMESPACE + "."):
            return
        try:
            self.publisher.emit(record.created, self.config.tag, self.build_record(record))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.acquire()
        try:
            self.publisher.close()
        finally:
            self.release()
        super().close()
