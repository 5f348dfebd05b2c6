"""External result reporting.

Reporting is best-effort and never sits on the validation path: results are
queued and a background thread forwards them to a sink. A failing sink loses
that result and logs a warning; it never fails a unit or the run.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
from pathlib import Path
import queue
import threading
from typing import Protocol

from docprobe_core.models.report import UnitId, UnitResult

_logger = logging.getLogger("docprobe.reporting")

_STOP = object()


class ResultReporter(Protocol):
    def start_unit(self, unit_id: UnitId) -> None: ...

    def finish_unit(self, result: UnitResult) -> None: ...

    def close(self) -> None: ...


class NullReporter:
    def start_unit(self, unit_id: UnitId) -> None:
        pass

    def finish_unit(self, result: UnitResult) -> None:
        pass

    def close(self) -> None:
        pass


class QueuedReporter:
    """Delivers finished unit results to ``sink`` from a background thread."""

    def __init__(self, sink: Callable[[UnitResult], None]):
        self._sink = sink
        self._queue: queue.Queue = queue.Queue()
        self._closed = False
        self._thread = threading.Thread(target=self._drain, name="docprobe-reporter", daemon=True)
        self._thread.start()

    def start_unit(self, unit_id: UnitId) -> None:
        _logger.debug("Started %s", unit_id)

    def finish_unit(self, result: UnitResult) -> None:
        if self._closed:
            _logger.warning("Reporter closed; dropping result for %s", result.unit_id)
            return
        self._queue.put(result)

    def close(self, timeout: float | None = None) -> None:
        """Flush queued results and stop the worker thread. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join(timeout)

    def __enter__(self) -> "QueuedReporter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._sink(item)
            except Exception as e:
                _logger.warning("Could not report result for %s: %s", item.unit_id, e)
            finally:
                self._queue.task_done()


class JsonLinesSink:
    """Appends one JSON object per finished unit to a file.

    The record is the flat (unit_id, outcome, message, detail_text) row used
    by external build-status systems.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, result: UnitResult) -> None:
        record = {
            "unit_id": str(result.unit_id),
            "outcome": result.outcome,
            "message": result.message,
            "detail_text": result.detail_text,
            "duration_s": result.duration_s,
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")
