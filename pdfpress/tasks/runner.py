from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

import structlog

logger = structlog.get_logger()


class JobRunner:
    """Thread pool that runs compression jobs off the request path.

    There is no cancellation: a submitted job runs until it resolves.
    shutdown() waits for in-flight jobs unless told otherwise.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pdfpress-job")

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(_log_task_error)
        return future

    def shutdown(self, wait: bool = True) -> None:
        logger.info("runner_stopping", wait=wait)
        self._executor.shutdown(wait=wait)


def _log_task_error(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error("background_task_error", error=str(exc), error_type=type(exc).__name__)
