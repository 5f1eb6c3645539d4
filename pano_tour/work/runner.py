from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def default_max_workers() -> int:
    return int(os.getenv("PANO_MAX_WORKERS", "2"))


class JobRunner:
    """
    Bounded pool of background conversion tasks, one task per job id.

    start() never waits for the task. Jobs beyond the pool size queue up in
    submission order. shutdown() drops queued tasks and returns their ids so
    the caller can mark them abandoned; tasks already running finish on their
    own thread.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or default_max_workers(),
            thread_name_prefix="pano-job",
        )
        self._futures: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def start(self, job_id: str, task: Callable[[str], None]) -> Future:
        with self._lock:
            fut = self._executor.submit(task, job_id)
            self._futures[job_id] = fut
        fut.add_done_callback(lambda f: self._forget(job_id, f))
        return fut

    def _forget(self, job_id: str, fut: Future) -> None:
        if not fut.cancelled() and fut.exception() is not None:
            logger.error("job %s: task died", job_id, exc_info=fut.exception())
        with self._lock:
            if self._futures.get(job_id) is fut:
                del self._futures[job_id]

    def wait(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            futures = list(self._futures.values())
        _done, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self) -> List[str]:
        with self._lock:
            unfinished = [(job_id, fut) for job_id, fut in self._futures.items() if not fut.done()]
        self._executor.shutdown(wait=False, cancel_futures=True)
        dropped = [job_id for job_id, fut in unfinished if fut.cancelled()]
        running = [job_id for job_id, fut in unfinished if not fut.cancelled()]
        if dropped:
            logger.warning("shutting down, dropped %d queued job(s): %s", len(dropped), ", ".join(dropped))
        if running:
            logger.warning("shutting down, %d job(s) still running: %s", len(running), ", ".join(running))
        return dropped
