import functools
import logging
import time
from typing import Any, Callable


logger = logging.getLogger('qvq')

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _safe_repr(x, maxlen=120):
    try:
        r = repr(x)
    except Exception:
        r = '<repr error>'
    if len(r) > maxlen:
        r = r[:maxlen] + '...'
    return r


def _format_args(func: Callable, args: tuple, kwargs: dict, mask: tuple[str, ...]) -> str:
    """name=value pairs of a call; self/cls are skipped, masked names hidden."""
    code = func.__code__
    names = code.co_varnames[:code.co_argcount]
    pairs = list(zip(names, args)) + list(kwargs.items())
    return ", ".join(
        f"{name}={'***' if name in mask else _safe_repr(value)}"
        for name, value in pairs
        if name not in ("self", "cls")
    )


def log_io(level: int = logging.DEBUG, mask: tuple[str, ...] = (), slow_ms: float | None = None):
    """
    Log a call's arguments, result and elapsed time.

    :param level: logging level of the call/return records.
    :param mask: argument names whose values are shown as ``***``.
    :param slow_ms: calls slower than this are also logged as WARNING,
        whatever *level* is.
    :return: decorator
    """
    def deco(func: Callable):
        qualname = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if logger.isEnabledFor(level):
                logger.log(level, "-> %s(%s)", qualname, _format_args(func, args, kwargs, mask))

            t0 = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", qualname)
                raise
            dt = (time.perf_counter() - t0) * 1000.0

            if logger.isEnabledFor(level):
                logger.log(level, "<- %s [%0.1f ms] = %s", qualname, dt, _safe_repr(result))
            if slow_ms is not None and dt > slow_ms:
                logger.warning("%s took %0.1f ms (limit %0.1f ms)", qualname, dt, slow_ms)
            return result
        return wrapper
    return deco


def level_from_name(value: Any, default: int = logging.INFO) -> int:
    """
    Normalise *value* (int, digit string or level name) to a logging level.
    Unknown values fall back to *default*.
    """
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return default
    s = value.strip()
    if s.isdigit():
        return int(s)
    name = s.upper()
    return getattr(logging, name) if name in _VALID_LEVELS else default
