"""
debug_trace.py

Trace instrumentation for the viewer: gesture, layout and export events.
Enable by setting the ERDCANVAS_TRACE environment variable to 1.
Set ERDCANVAS_TRACE_PAINT=1 as well to trace paint events (very verbose).
"""

import os
import sys
import traceback
from datetime import datetime
from functools import wraps


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


DEBUG_TRACE = _env_flag("ERDCANVAS_TRACE")

TRACE_PAINT = _env_flag("ERDCANVAS_TRACE_PAINT")

# Log file (None for stderr only)
LOG_FILE = os.environ.get("ERDCANVAS_TRACE_FILE") or None

_log_file = None


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"[trace] cannot open {LOG_FILE}: {e}", file=sys.stderr)
    return _log_file


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return
    if category == "PAINT" and not TRACE_PAINT:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def trace_exception(msg: str = "Exception"):
    """Print exception info."""
    if not DEBUG_TRACE:
        return
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls."""
    def decorator(func):
        if not DEBUG_TRACE:
            return func

        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        _log_file.close()
        _log_file = None
