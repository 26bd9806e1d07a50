"""
Rotating Log File Recorder - Daily Log Files with Retention

This module owns one log directory and writes formatted log lines into one
file per calendar day, deleting files that fall outside the retention
window.

Safety Requirements:
- All filesystem work runs through a single dispatcher (FIFO, one at a time)
- At most one file handle open per recorder
- A failed write never leaves a partial line behind
- Pruning is best-effort: a file that cannot be deleted is reported and
  retried on the next pass

Two recorders must not share a directory; their pruning passes would race.

In asynchronous mode, lines still queued when the interpreter exits are
drained by an atexit hook; call shutdown() to release the file earlier.

Usage:
    recorder = RotatingLogFileRecorder(days_to_keep=7, directory_path="logs/daily")
    recorder.create_log_directory()
    recorder.record("service started", datetime.now(timezone.utc), LogSeverity.INFO)
    recorder.shutdown()
"""

import atexit
import errno
import functools
import logging
import os
import weakref
from collections import deque
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from daylog.day_files import DayFileNaming, day_key, local_timezone
from daylog.dispatch import ErrorHandler, SerialWorker, SynchronousDispatcher
from daylog.errors import DaylogError, DirectoryCreationError, PruneWarning, WriteError
from daylog.log_entry import LogSeverity

logger = logging.getLogger(__name__)


class RecorderState(Enum):
    UNINITIALIZED = "uninitialized"
    DIRECTORY_READY = "directory_ready"
    FILE_OPEN = "file_open"
    ROTATING = "rotating"
    SHUT_DOWN = "shut_down"


class RotatingLogFileRecorder:
    """
    Writes log lines into daily files inside a single directory.

    Features:
    - Day-partitioned files named by DayFileNaming ({prefix}YYYY-MM-DD{ext})
    - Lazy creation of the directory and of each day's file
    - Pruning of expired files after every forward rotation
    - Synchronous mode (caller thread, lock-serialized) or asynchronous
      mode (single background writer thread)
    - Statistics tracking (entries, bytes, rotations, pruned files)
    """

    def __init__(
        self,
        days_to_keep: int,
        directory_path: Union[str, Path],
        synchronous_mode: bool = False,
        naming: Optional[DayFileNaming] = None,
        tz: Optional[tzinfo] = None,
        error_handler: Optional[ErrorHandler] = None,
        line_separator: str = "\n",
        encoding: str = "utf-8",
        fsync: bool = False,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the recorder.

        Args:
            days_to_keep: Number of days of files to retain, including today
                (0 keeps only the active day's file)
            directory_path: Directory holding the daily files
            synchronous_mode: Block callers until each write completes
            naming: File naming scheme (default: YYYY-MM-DD.log)
            tz: Zone used to compute calendar days (default: process local
                zone at construction time)
            error_handler: Receives WriteError/PruneWarning instances that
                cannot be raised to a caller
            line_separator: Appended to every recorded line
            encoding: Text encoding of the files
            fsync: fsync the file after each write and on close
            clock: Returns the current time; used to compute "today"
        """
        if days_to_keep < 0:
            raise ValueError(f"days_to_keep must be non-negative, got {days_to_keep}")

        self.days_to_keep = days_to_keep
        self.directory_path = Path(directory_path)
        self.synchronous_mode = synchronous_mode
        self.naming = naming or DayFileNaming()
        self.tz = tz or local_timezone()
        self.line_separator = line_separator
        self.encoding = encoding
        self.fsync = fsync
        self._clock = clock
        self._error_handler = error_handler

        # Owned by whichever thread the dispatcher runs tasks on
        self._state = RecorderState.UNINITIALIZED
        self._directory_ready = False
        self._current_day: Optional[date] = None
        self._current_path: Optional[Path] = None
        self._handle = None
        self._offset = 0

        # Errors raised inside a task, delivered once the task has finished
        self._pending_reports: deque = deque()

        self._write_stats = {
            'entries_written': 0,
            'bytes_written': 0,
            'rotations': 0,
            'files_pruned': 0,
            'failed_writes': 0,
            'failed_prunes': 0,
            'entries_by_severity': {severity.name: 0 for severity in LogSeverity},
            'last_write_time': None
        }

        if synchronous_mode:
            self._dispatcher = SynchronousDispatcher(after_task=self._deliver_reports)
            self._atexit_hook = None
        else:
            self._dispatcher = SerialWorker(
                name=f"daylog-writer-{self.directory_path.name or 'root'}",
                error_handler=self._report,
                after_task=self._deliver_reports
            )
            self._atexit_hook = functools.partial(_shutdown_at_exit, weakref.ref(self))
            atexit.register(self._atexit_hook)

        logger.info(
            f"RotatingLogFileRecorder initialized: directory={self.directory_path}, "
            f"days_to_keep={days_to_keep}, synchronous={synchronous_mode}, tz={self.tz}"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def current_log_file(self) -> Optional[Path]:
        """Path of the currently open day file, if any."""
        return self._current_path if self._handle is not None else None

    def create_log_directory(self):
        """
        Create the log directory (and parents) if it does not exist.

        Raises:
            DirectoryCreationError: If the path is not usable as a directory
            RecorderClosedError: If the recorder has been shut down
        """
        self._dispatcher.call(self._create_directory)

    def record(self, formatted_text: str, timestamp: datetime, severity: LogSeverity):
        """
        Append one formatted line to the file for timestamp's day.

        Args:
            formatted_text: Text to write (written verbatim, even if empty)
            timestamp: Entry time, selects the day file
            severity: Entry severity

        Raises:
            WriteError: Synchronous mode only; in asynchronous mode failures
                go to the error handler
            RecorderClosedError: If the recorder has been shut down
        """
        severity = LogSeverity(severity)
        data = (formatted_text + self.line_separator).encode(self.encoding, errors="backslashreplace")
        future = self._dispatcher.submit(
            lambda: self._write_entry(data, timestamp, severity),
            report_errors=not self.synchronous_mode
        )
        if self.synchronous_mode:
            future.result()

    def prune(self, today: Optional[date] = None) -> List[Path]:
        """
        Run a pruning pass now.

        Args:
            today: Day to treat as today (default: current day in tz)

        Returns:
            Paths of the files deleted
        """
        return self._dispatcher.call(
            lambda: self._prune(today if today is not None else self._today())
        )

    def flush(self):
        """Wait for all submitted writes to be applied, then flush the file."""
        self._dispatcher.call(self._flush_handle)

    def shutdown(self):
        """Drain pending writes and close the current file. Idempotent."""
        if self._atexit_hook is not None:
            atexit.unregister(self._atexit_hook)
        if self._dispatcher.close(self._close_for_shutdown):
            logger.info(f"RotatingLogFileRecorder for {self.directory_path} shut down")

    def list_log_files(self) -> List[Path]:
        """All files in the directory that match the naming scheme, oldest first."""
        if not self.directory_path.is_dir():
            return []
        dated = []
        for path in self.directory_path.iterdir():
            day = self.naming.parse(path.name)
            if day is not None and path.is_file():
                dated.append((day, path))
        return [path for _, path in sorted(dated)]

    def get_stats_summary(self) -> Dict:
        stats = dict(self._write_stats)
        stats['entries_by_severity'] = dict(self._write_stats['entries_by_severity'])
        stats['last_write_time'] = (
            stats['last_write_time'].isoformat() if stats['last_write_time'] else None
        )
        stats.update({
            'directory': str(self.directory_path),
            'current_file': str(self.current_log_file) if self.current_log_file else None,
            'days_to_keep': self.days_to_keep,
            'state': self._state.value
        })
        return stats

    def __repr__(self):
        return (
            f"RotatingLogFileRecorder(directory_path={str(self.directory_path)!r}, "
            f"days_to_keep={self.days_to_keep}, synchronous_mode={self.synchronous_mode})"
        )

    # ------------------------------------------------------------------
    # Dispatcher tasks
    # ------------------------------------------------------------------

    def _create_directory(self):
        path = self.directory_path
        try:
            path.mkdir(parents=True, exist_ok=True)
        except FileExistsError:
            raise DirectoryCreationError(path, "path exists and is not a directory") from None
        except OSError as e:
            raise DirectoryCreationError(path, e.strerror or str(e)) from e

        self._directory_ready = True
        if self._state is RecorderState.UNINITIALIZED:
            self._state = RecorderState.DIRECTORY_READY

    def _write_entry(self, data: bytes, timestamp: datetime, severity: LogSeverity):
        day = day_key(timestamp, self.tz)
        # Same day as the last write with a healthy handle: no filesystem lookup
        if self._handle is None or day != self._current_day:
            self._open_day(day)
        self._append(data)

        self._write_stats['entries_written'] += 1
        self._write_stats['bytes_written'] += len(data)
        self._write_stats['entries_by_severity'][severity.name] += 1
        self._write_stats['last_write_time'] = datetime.now()

    def _open_day(self, day: date):
        previous_day = self._current_day
        rotating = previous_day is not None and day != previous_day

        if rotating:
            self._state = RecorderState.ROTATING
            self._close_handle()

        if not self._directory_ready:
            try:
                self._create_directory()
            except DirectoryCreationError as e:
                raise WriteError(self.directory_path, e.reason) from e

        path = self.directory_path / self.naming.filename_for(day)
        try:
            handle = self._open_log_file(path)
            offset = handle.tell()
        except OSError as e:
            # Directory may have been removed underneath us; recreate next time
            self._directory_ready = False
            self._state = RecorderState.DIRECTORY_READY
            raise WriteError(path, e.strerror or str(e)) from e

        self._handle = handle
        self._offset = offset
        self._current_day = day
        self._current_path = path
        self._state = RecorderState.FILE_OPEN

        if rotating:
            self._write_stats['rotations'] += 1
            logger.info(f"Rotated log file: {previous_day} -> {day} ({path.name})")
        else:
            logger.debug(f"Opened log file {path}")

        if previous_day is None or day > previous_day:
            self._prune(self._today())

    def _open_log_file(self, path: Path):
        """Open path for unbuffered binary append."""
        return open(path, "ab", buffering=0)

    def _append(self, data: bytes):
        view = memoryview(data)
        written = 0
        try:
            while written < len(data):
                count = self._handle.write(view[written:])
                if not count:
                    raise OSError(errno.EIO, "short write")
                written += count
            if self.fsync:
                os.fsync(self._handle.fileno())
        except OSError as e:
            self._write_stats['failed_writes'] += 1
            path = self._current_path
            self._discard_partial_write()
            raise WriteError(path, e.strerror or str(e)) from e

        self._offset += len(data)

    def _discard_partial_write(self):
        """Truncate back to the last complete line and drop the handle."""
        handle = self._handle
        self._handle = None
        self._state = RecorderState.DIRECTORY_READY
        try:
            handle.truncate(self._offset)
        except OSError as e:
            logger.warning(f"Could not truncate partial write in {self._current_path}: {e}")
        try:
            handle.close()
        except OSError as e:
            logger.warning(f"Could not close {self._current_path} after failed write: {e}")

    def _flush_handle(self):
        if self._handle is None:
            return
        try:
            self._handle.flush()
            if self.fsync:
                os.fsync(self._handle.fileno())
        except OSError as e:
            raise WriteError(self._current_path, e.strerror or str(e)) from e

    def _close_handle(self):
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        try:
            if self.fsync:
                os.fsync(handle.fileno())
            handle.close()
        except OSError as e:
            self._report(WriteError(self._current_path, f"close failed: {e.strerror or e}"))

    def _close_for_shutdown(self):
        self._close_handle()
        self._state = RecorderState.SHUT_DOWN

    def _prune(self, today: date) -> List[Path]:
        """
        Delete day files older than the retention window.

        The window always covers at least today; the open file is never
        deleted.
        """
        oldest_kept = today - timedelta(days=max(self.days_to_keep, 1) - 1)

        try:
            entries = sorted(self.directory_path.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            self._write_stats['failed_prunes'] += 1
            self._report(PruneWarning(self.directory_path, e.strerror or str(e)))
            return []

        deleted = []
        for path in entries:
            day = self.naming.parse(path.name)
            if day is None or day >= oldest_kept:
                continue
            if self._handle is not None and path == self._current_path:
                continue
            if not path.is_file():
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                self._write_stats['failed_prunes'] += 1
                self._report(PruneWarning(path, e.strerror or str(e)))
                continue
            deleted.append(path)

        if deleted:
            self._write_stats['files_pruned'] += len(deleted)
            logger.info(f"Pruned {len(deleted)} log file(s) older than {oldest_kept} from {self.directory_path}")
        return deleted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _today(self) -> date:
        now = self._clock() if self._clock else datetime.now(self.tz)
        return day_key(now, self.tz)

    def _report(self, error: Exception):
        """
        Queue an error that has no caller to raise it to.

        Reports raised while a task runs are delivered by _deliver_reports
        after the task has finished, so an error handler may log back into
        this recorder.
        """
        self._pending_reports.append(error)

    def _deliver_reports(self):
        while True:
            try:
                error = self._pending_reports.popleft()
            except IndexError:
                return
            self._notify(error)

    def _notify(self, error: Exception):
        if isinstance(error, PruneWarning):
            logger.warning(str(error))
        elif isinstance(error, DaylogError):
            logger.error(str(error))
        else:
            logger.error(f"Unexpected recorder failure: {error!r}")

        if self._error_handler is None:
            return
        try:
            self._error_handler(error)
        except Exception:
            logger.error("Recorder error handler raised", exc_info=True)


def _shutdown_at_exit(recorder_ref):
    recorder = recorder_ref()
    if recorder is not None:
        recorder.shutdown()
