"""Unit tests for synchronous and background dispatch."""

import threading

import pytest

from daylog.dispatch import SerialWorker, SynchronousDispatcher
from daylog.errors import RecorderClosedError


def test_serial_worker_runs_tasks_in_order_on_one_thread():
    worker = SerialWorker(name="test-worker")
    results = []
    threads = set()

    def task(i):
        results.append(i)
        threads.add(threading.current_thread().name)

    for i in range(100):
        worker.submit(lambda i=i: task(i))
    worker.close()

    assert results == list(range(100))
    assert threads == {"test-worker"}, "All tasks run on the worker thread"


def test_serial_worker_returns_results_through_futures():
    worker = SerialWorker()
    try:
        assert worker.submit(lambda: 41 + 1).result(timeout=5) == 42
    finally:
        worker.close()


def test_serial_worker_reports_errors_and_keeps_running():
    reported = []
    worker = SerialWorker(error_handler=reported.append)

    def boom():
        raise OSError("disk gone")

    failed = worker.submit(boom, report_errors=True)
    quiet = worker.submit(boom)
    after = worker.submit(lambda: "still alive")

    assert after.result(timeout=5) == "still alive"
    assert isinstance(failed.exception(timeout=5), OSError)
    assert isinstance(quiet.exception(timeout=5), OSError)
    assert len(reported) == 1, "Only report_errors tasks reach the handler"
    worker.close()


def test_serial_worker_close_is_a_barrier():
    worker = SerialWorker()
    done = []

    for i in range(50):
        worker.submit(lambda i=i: done.append(i))
    worker.close(lambda: done.append("final"))

    assert done[-1] == "final"
    assert len(done) == 51
    assert worker.close() is False, "Second close is a no-op"
    with pytest.raises(RecorderClosedError):
        worker.submit(lambda: None)


def test_synchronous_dispatcher_captures_exceptions_on_future():
    dispatcher = SynchronousDispatcher()

    future = dispatcher.submit(lambda: 1 / 0)

    with pytest.raises(ZeroDivisionError):
        future.result()
    assert dispatcher.submit(lambda: "ok").result() == "ok"


def test_synchronous_dispatcher_refuses_after_close():
    dispatcher = SynchronousDispatcher()
    closed = []

    assert dispatcher.close(lambda: closed.append(True)) is True
    assert dispatcher.close() is False
    assert closed == [True]
    with pytest.raises(RecorderClosedError):
        dispatcher.submit(lambda: None)
