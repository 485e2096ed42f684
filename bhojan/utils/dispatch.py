"""Fire-and-forget dispatch for notifications"""
import logging
from concurrent.futures import Executor, Future
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Runs notification calls without making the caller wait on them.

    Delivery is best effort: failures are logged and never reach the caller.
    With no executor the call runs inline, with the same failure handling.
    """

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor

    def dispatch(self, fn: Callable, *args, **kwargs):
        name = getattr(fn, '__name__', repr(fn))
        if self.executor is None:
            try:
                fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Notification {name} failed: {e}", exc_info=True)
            return None

        future = self.executor.submit(fn, *args, **kwargs)
        future.add_done_callback(lambda f: self._log_failure(name, f))
        return future

    @staticmethod
    def _log_failure(name: str, future: Future):
        error = future.exception()
        if error is not None:
            logger.error(f"Notification {name} failed: {error}", exc_info=error)

    def shutdown(self):
        if self.executor is not None:
            self.executor.shutdown(wait=True)
