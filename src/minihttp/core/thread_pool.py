"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling connections off a shared queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ThreadPool                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop ──submit()──► [Task] [Task] [Task] ...  (queue.Queue)  │
    │                                   │                                  │
    │                                   │ get()                            │
    │                                   ▼                                  │
    │            ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐       │
    │            │ Worker 0 │ │ Worker 1 │ │ Worker 2 │ │ Worker 3 │       │
    │            └──────────┘ └──────────┘ └──────────┘ └──────────┘       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The queue is unbounded: submit() never blocks and never rejects. When all
workers are busy, connections simply wait their turn in FIFO order.

=============================================================================
SHUTDOWN: THE POISON PILL
=============================================================================

    pool.shutdown()
        └─ queue.put(None) once per worker
        └─ each worker pulls a None and leaves its loop

Pills are queued behind any pending tasks, so work accepted before
shutdown still runs.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Any, Callable, Optional
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred call: run func(*args, **kwargs) on some worker.

    Attributes:
        func: The function to execute.
        args: Positional arguments.
        kwargs: Keyword arguments.
        submitted_at: When the task entered the queue.
    """

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)

    @property
    def wait_time(self) -> float:
        """Seconds spent in the queue so far."""
        return time.time() - self.submitted_at


class Worker(threading.Thread):
    """
    Worker thread.

    Loops: take a task, run it, mark it done. A None task ends the loop.
    An exception from a task is logged and counted; the worker carries on
    with the next task.
    """

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        # daemon=True so a stuck worker never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        logger.debug(f"Worker {self.worker_id} picked up task after {task.wait_time:.3f}s in queue")

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}")
            self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool.

        pool = ThreadPool(workers=4)
        pool.start()
        pool.submit(handle_connection, args=(conn,))
        ...
        pool.shutdown()
    """

    def __init__(self, workers: int = 4):
        if workers < 1:
            raise ValueError("workers must be >= 1")

        self.workers = workers

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()
        self._workers: list = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Spawn the worker threads. Calling it twice is a no-op."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")

            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None):
        """
        Queue func(*args, **kwargs) for execution.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the workers after they drain the queue.

        Args:
            wait: Join the worker threads before returning.
            timeout: Per-worker join timeout in seconds. None waits forever.
        """
        with self._lock:
            if not self._started or self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} still running after {timeout}s")

        self._workers.clear()
        self._started = False

        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queue_size(self) -> int:
        """Tasks waiting for a worker."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counts, for debugging and tests."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
