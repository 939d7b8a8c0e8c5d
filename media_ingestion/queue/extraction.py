"""Single-worker FIFO queue for expensive extraction jobs.

Jobs run one at a time on a dedicated worker thread, in submission order. Every
submission hands back a ``QueueJob`` whose ``concurrent.futures.Future`` completes
with the job's result or exception, so callers block on the future instead of
polling. A submission whose key is already queued or running shares that job.
Failed jobs are never retried.
"""

from __future__ import annotations

from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
import logging
import threading
import time
from typing import Any, Callable


logger = logging.getLogger(__name__)


class JobState(str, Enum):
    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class QueueJob:
    key: str
    func: Callable[[], Any]
    future: Future = field(default_factory=Future)
    state: JobState = JobState.SUBMITTED
    submitted_at: float = field(default_factory=time.monotonic)
    started_at: float | None = None
    finished_at: float | None = None
    error: BaseException | None = None
    waiters: int = 1

    def result(self, timeout: float | None = None) -> Any:
        """Block until the job finishes; re-raises the job's exception."""
        return self.future.result(timeout=timeout)

    def done(self) -> bool:
        return self.future.done()


class QueueStoppedError(RuntimeError):
    pass


class ExtractionQueue:
    def __init__(self, name: str = "extraction") -> None:
        self.name = name
        self._pending: deque[QueueJob] = deque()
        self._inflight: dict[str, QueueJob] = {}
        self._running: QueueJob | None = None
        self._lock = threading.Lock()
        self._wakeup = threading.Condition(self._lock)
        self._stopped = False
        self._thread: threading.Thread | None = None
        self._completed = 0
        self._failed = 0

    def submit(self, key: str, func: Callable[[], Any]) -> QueueJob:
        with self._wakeup:
            if self._stopped:
                raise QueueStoppedError(f"{self.name} queue is stopped")
            existing = self._inflight.get(key)
            if existing is not None:
                existing.waiters += 1
                logger.debug("Joining in-flight job %s (%s, %d waiters)", key, existing.state.value, existing.waiters)
                return existing
            job = QueueJob(key=key, func=func)
            self._pending.append(job)
            self._inflight[key] = job
            self._ensure_worker()
            logger.info("Queued job %s (%d waiting)", key, len(self._pending))
            self._wakeup.notify()
            return job

    def cancel(self, key: str) -> bool:
        """Cancel a job that has not started yet."""
        with self._wakeup:
            job = self._inflight.get(key)
            if job is None or job.state is not JobState.SUBMITTED:
                return False
            self._cancel_pending(job)
            return True

    def abandon(self, job: QueueJob) -> bool:
        """Drop one waiter; a job nobody waits for any more is cancelled if it has not started."""
        with self._wakeup:
            job.waiters = max(0, job.waiters - 1)
            if job.waiters or job.state is not JobState.SUBMITTED or self._inflight.get(job.key) is not job:
                return False
            self._cancel_pending(job)
            return True

    def _cancel_pending(self, job: QueueJob) -> None:
        # caller holds the lock
        self._pending.remove(job)
        self._inflight.pop(job.key, None)
        job.state = JobState.CANCELLED
        job.finished_at = time.monotonic()
        job.future.cancel()
        logger.info("Cancelled job %s", job.key)

    def stop(self, wait: bool = True, timeout: float | None = None) -> None:
        """Cancel waiting jobs and let the running one finish."""
        with self._wakeup:
            self._stopped = True
            while self._pending:
                job = self._pending.popleft()
                self._inflight.pop(job.key, None)
                job.state = JobState.CANCELLED
                job.future.cancel()
            self._wakeup.notify_all()
            thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def stats(self) -> dict:
        with self._lock:
            return {
                "waiting": len(self._pending),
                "running": 1 if self._running is not None else 0,
                "completed": self._completed,
                "failed": self._failed,
            }

    def _ensure_worker(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=f"{self.name}-worker", daemon=True)
            self._thread.start()

    def _next_job(self) -> QueueJob | None:
        with self._wakeup:
            while True:
                while not self._pending and not self._stopped:
                    self._wakeup.wait()
                if not self._pending:
                    return None
                job = self._pending.popleft()
                if job.future.set_running_or_notify_cancel():
                    break
                # future was cancelled directly by a caller
                self._inflight.pop(job.key, None)
                job.state = JobState.CANCELLED
            job.state = JobState.RUNNING
            job.started_at = time.monotonic()
            self._running = job
            return job

    def _run(self) -> None:
        logger.info("%s worker starting", self.name)
        while True:
            job = self._next_job()
            if job is None:
                break
            logger.info("Running job %s", job.key)
            try:
                result = job.func()
            except Exception as exc:
                self._finish(job, JobState.FAILED, error=exc)
                logger.warning("Job %s failed: %s", job.key, exc)
                job.future.set_exception(exc)
            else:
                self._finish(job, JobState.COMPLETED)
                job.future.set_result(result)
        logger.info("%s worker stopped", self.name)

    def _finish(self, job: QueueJob, state: JobState, error: BaseException | None = None) -> None:
        with self._wakeup:
            job.state = state
            job.error = error
            job.finished_at = time.monotonic()
            self._running = None
            self._inflight.pop(job.key, None)
            if state is JobState.COMPLETED:
                self._completed += 1
            else:
                self._failed += 1
