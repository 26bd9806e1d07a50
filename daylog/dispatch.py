"""
Dispatch - Serialized Execution of Recorder Tasks

Every filesystem operation of a recorder runs through exactly one
dispatcher, which applies tasks one at a time in submission order.

- SynchronousDispatcher: runs the task on the calling thread, under a lock
- SerialWorker: a single background thread consuming a FIFO queue; the
  calling thread only enqueues

Both return a concurrent.futures.Future for each submitted task, and both
run an optional after_task callback once a task has finished and no
dispatcher state is held. Callbacks run there may submit new work.

Usage:
    worker = SerialWorker(name="daylog-writer", error_handler=handle)
    worker.submit(write_line, report_errors=True)
    worker.call(flush_file)   # barrier
    worker.close(close_file)
"""

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from daylog.errors import RecorderClosedError

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Exception], None]

_STOP = object()


def _run_after_task(after_task: Optional[Callable[[], None]]):
    if after_task is None:
        return
    try:
        after_task()
    except Exception:
        logger.error("after_task callback failed", exc_info=True)


class SynchronousDispatcher:
    """
    Runs each task inline, serialized by a lock.

    Exceptions are captured on the returned Future; the caller decides
    whether to re-raise them with future.result(). after_task runs on the
    calling thread once the lock has been released.
    """

    def __init__(self, after_task: Optional[Callable[[], None]] = None):
        self._lock = threading.Lock()
        self._closed = False
        self._after_task = after_task

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, task: Callable[[], Any], report_errors: bool = False) -> Future:
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RecorderClosedError("Recorder has been shut down")
            future.set_running_or_notify_cancel()
            try:
                future.set_result(task())
            except Exception as e:
                future.set_exception(e)
        _run_after_task(self._after_task)
        return future

    def call(self, task: Callable[[], Any]) -> Any:
        """Run task and return its result, re-raising its exception."""
        return self.submit(task).result()

    def close(self, final_task: Optional[Callable[[], Any]] = None) -> bool:
        """
        Run final_task (if any) and refuse further submissions.

        Returns:
            False if the dispatcher was already closed
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            if final_task is not None:
                final_task()
        _run_after_task(self._after_task)
        return True


class SerialWorker:
    """
    Single background worker applying tasks strictly in FIFO order.

    Features:
    - One daemon thread owns all work submitted to it
    - Submission from any number of threads only enqueues
    - Errors from fire-and-forget tasks go to error_handler
    - after_task runs on the worker between tasks
    - close() is a barrier: queued tasks run before the thread exits
    """

    def __init__(
        self,
        name: str = "daylog-writer",
        error_handler: Optional[ErrorHandler] = None,
        after_task: Optional[Callable[[], None]] = None
    ):
        """
        Start the worker thread.

        Args:
            name: Thread name
            error_handler: Receives exceptions raised by tasks submitted
                with report_errors=True
            after_task: Called on the worker thread after every task
        """
        self.name = name
        self._error_handler = error_handler
        self._after_task = after_task
        self._queue: queue.Queue = queue.Queue()
        self._submit_lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

        logger.debug(f"SerialWorker {name} started")

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, task: Callable[[], Any], report_errors: bool = False) -> Future:
        """
        Enqueue a task.

        Args:
            task: Zero-argument callable
            report_errors: Send a failure to the error handler as well as
                to the Future (for callers that will not wait on it)

        Raises:
            RecorderClosedError: If the worker has been closed
        """
        future: Future = Future()
        with self._submit_lock:
            if self._closed:
                raise RecorderClosedError("Recorder has been shut down")
            self._queue.put((task, future, report_errors))
        return future

    def call(self, task: Callable[[], Any]) -> Any:
        """
        Run task after everything queued before it and return its result.

        From the worker thread itself (an after_task or error_handler
        callback) the task runs immediately: waiting on the queue there
        would wait on the current thread.

        Raises:
            RecorderClosedError: If the worker has been closed
        """
        if threading.current_thread() is self._thread:
            if self._closed:
                raise RecorderClosedError("Recorder has been shut down")
            return task()
        return self.submit(task).result()

    def close(self, final_task: Optional[Callable[[], Any]] = None) -> bool:
        """
        Drain the queue, run final_task last, then stop the thread.

        Returns:
            False if the worker was already closed
        """
        with self._submit_lock:
            if self._closed:
                return False
            self._closed = True
            if final_task is not None:
                self._queue.put((final_task, Future(), True))
            self._queue.put(_STOP)

        if threading.current_thread() is not self._thread:
            self._thread.join()
        logger.debug(f"SerialWorker {self.name} stopped")
        return True

    def _run(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                break

            task, future, report_errors = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(task())
            except Exception as e:
                future.set_exception(e)
                if report_errors:
                    self._report(e)
            _run_after_task(self._after_task)

    def _report(self, error: Exception):
        if self._error_handler is None:
            logger.error(f"Background log task failed: {error}")
            return
        try:
            self._error_handler(error)
        except Exception:
            logger.error("Error handler raised while reporting a log failure", exc_info=True)
