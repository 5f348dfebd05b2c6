import logging
import os
import time
from functools import wraps

_SPY_LOGGER = logging.getLogger("docprobe.spy")
_FALSE_VALUES = {"", "0", "false", "no", "off"}


def spy_enabled() -> bool:
    return os.getenv("DOCPROBE_SPY", "0").strip().lower() not in _FALSE_VALUES


def spy_trace(func):
    """Trace calls to ``func`` on the ``docprobe.spy`` logger when DOCPROBE_SPY is set.

    Validators return finding lists, so the exit line carries the count.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        if not spy_enabled():
            return func(*args, **kwargs)
        started = time.perf_counter()
        _SPY_LOGGER.debug("-> %s", func.__qualname__)
        result = func(*args, **kwargs)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if isinstance(result, list):
            _SPY_LOGGER.debug("<- %s: %d finding(s) in %.1f ms", func.__qualname__, len(result), elapsed_ms)
        else:
            _SPY_LOGGER.debug("<- %s in %.1f ms", func.__qualname__, elapsed_ms)
        return result

    return wrapper
