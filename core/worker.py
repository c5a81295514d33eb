"""
Background round trips for the window.

Tk widgets may only be touched from the main thread, so each model call runs
on a daemon thread and its outcome is handed back through ``post`` (the
window passes ``lambda cb: self.after(0, cb)``).
"""

import threading
from typing import Any, Callable, Type

from .errors import GeoBuddyError
from .logger import Timer, logger


def run_in_background(
    name: str,
    work: Callable[[], Any],
    on_done: Callable[[Any], None],
    on_error: Callable[[GeoBuddyError], None],
    post: Callable[[Callable[[], None]], Any],
    unexpected: Type[GeoBuddyError] = GeoBuddyError,
) -> threading.Thread:
    """
    Run ``work()`` on a daemon thread and post exactly one callback.

    ``on_done(result)`` on success, ``on_error(error)`` on any failure.
    Exceptions outside GeoBuddyError are wrapped in ``unexpected`` so the
    window always gets a typed error and can leave its busy state.
    """

    def target() -> None:
        logger.task_start(name)
        try:
            with Timer() as timer:
                result = work()
        except GeoBuddyError as e:
            logger.task_error(name, str(e))
            post(lambda err=e: on_error(err))
            return
        except Exception as e:
            logger.task_error(name, repr(e), exc_info=True)
            wrapped = unexpected(f"Unexpected error: {e}")
            wrapped.__cause__ = e
            post(lambda err=wrapped: on_error(err))
            return
        logger.task_complete(name, duration_ms=timer.duration_ms)
        post(lambda: on_done(result))

    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    logger.task(f"Spawned background thread: {name}")
    return thread
