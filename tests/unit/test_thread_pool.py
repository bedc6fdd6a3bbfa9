"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from minihttp.core.thread_pool import Task, ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(workers=2)
    pool.start()
    yield pool
    pool.shutdown(timeout=2.0)


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_runs_submitted_tasks(self, pool: ThreadPool):
        """Test that every submitted task runs."""
        results = []
        lock = threading.Lock()

        def work(n, scale=1):
            with lock:
                results.append(n * scale)

        for i in range(10):
            pool.submit(work, args=(i,), kwargs={"scale": 2})
        pool.shutdown(timeout=2.0)

        assert sorted(results) == [i * 2 for i in range(10)]

    def test_tasks_run_concurrently(self, pool: ThreadPool):
        """Two workers can both be busy at once."""
        barrier = threading.Barrier(2, timeout=2.0)
        passed = []

        def wait_for_peer():
            barrier.wait()
            passed.append(True)

        pool.submit(wait_for_peer)
        pool.submit(wait_for_peer)
        pool.shutdown(timeout=2.0)

        assert passed == [True, True]

    def test_failing_task_does_not_kill_worker(self):
        """A task exception is counted and the worker keeps going."""
        pool = ThreadPool(workers=1)
        pool.start()
        done = threading.Event()

        def fail():
            raise RuntimeError("boom")

        pool.submit(fail)
        pool.submit(done.set)

        # One worker runs tasks in order, so fail() has finished by now
        assert done.wait(timeout=2.0)
        stats = pool.stats
        pool.shutdown(timeout=2.0)

        assert stats["tasks"]["failed"] == 1

    def test_submit_before_start(self):
        """Test that an unstarted pool refuses work."""
        with pytest.raises(RuntimeError):
            ThreadPool().submit(lambda: None)

    def test_submit_after_shutdown(self, pool: ThreadPool):
        """Test that a stopped pool refuses work."""
        pool.shutdown(timeout=2.0)

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_worker_count(self, pool: ThreadPool):
        assert pool.stats["workers"]["total"] == 2

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ThreadPool(workers=0)


class TestTask:
    """Tests for Task."""

    def test_defaults(self):
        task = Task(func=print)

        assert task.args == ()
        assert task.kwargs == {}
        assert task.wait_time >= 0
