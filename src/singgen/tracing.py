"""
Timing decorator for the top-level generation steps.

Entry and exit go to the debug log. A step slower than SLOW_STEP_SECONDS
(overridable through SINGGEN_SLOW_STEP_SECONDS) is reported as a warning,
since a projection or a local parse should finish well under that.
"""

import os
import time
import functools
from typing import Callable, Any
from singgen.logging_config import logger


def _slow_step_seconds() -> float:
    try:
        return float(os.getenv("SINGGEN_SLOW_STEP_SECONDS", "5"))
    except ValueError:
        return 5.0


SLOW_STEP_SECONDS = _slow_step_seconds()


def trace(func: Callable) -> Callable:
    """
    Log entry, exit and duration of `func`; failures are logged and re-raised.

    Usage:
        @trace
        def project(document, candidates):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        step = func.__qualname__
        logger.debug(f"TRACE_ENTER: {step}")
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.bind(step=step, duration_seconds=elapsed, status="error").error(
                f"TRACE_EXIT: {step} failed after {elapsed:.4f}s with {type(e).__name__}: {e}"
            )
            raise

        elapsed = time.perf_counter() - started
        bound = logger.bind(step=step, duration_seconds=elapsed, status="success")
        if elapsed > SLOW_STEP_SECONDS:
            bound.warning(f"TRACE_EXIT: {step} took {elapsed:.2f}s")
        else:
            bound.debug(f"TRACE_EXIT: {step} completed in {elapsed:.4f}s")
        return result

    return wrapper
