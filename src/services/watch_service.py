# Copyright (c) 2025 Trae AI. All rights reserved.

import os
import logging
import threading
from pathlib import Path
from typing import Callable, Optional
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from src.core.config import CONTROL_FILE_NAME
from src.core.control_file import ControlFileFormatError, read_control_lines, parse_control_lines
from src.core.models import WatcherState

TAG = "[ControlFileWatcher]"


class ControlFileHandler(FileSystemEventHandler):
    """
    Forwards events for one file name to a debounced trigger.
    Every qualifying event restarts the timer, so a burst of writes fires once.
    """

    def __init__(self, file_name: str, callback: Callable, debounce_seconds: float = 0.5):
        self.file_name = file_name
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.timer = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def _matches(self, path) -> bool:
        return os.path.basename(os.fsdecode(path)) == self.file_name

    def on_created(self, event):
        if not event.is_directory and self._matches(event.src_path):
            self._trigger(f"Created: {os.fsdecode(event.src_path)}")

    def on_modified(self, event):
        if not event.is_directory and self._matches(event.src_path):
            self._trigger(f"Modified: {os.fsdecode(event.src_path)}")

    def on_moved(self, event):
        # Only the new name counts; renaming the control file away is not a trigger
        if not event.is_directory and self._matches(event.dest_path):
            self._trigger(f"Renamed to: {os.fsdecode(event.dest_path)}")

    def _trigger(self, change_desc: str):
        self.logger.info(f"{TAG} Control file {change_desc}")
        with self._lock:
            if self.timer:
                self.timer.cancel()
            self.timer = threading.Timer(self.debounce_seconds, self._execute_callback)
            self.timer.daemon = True
            self.timer.start()

    def _execute_callback(self):
        with self._lock:
            self.timer = None
        self.callback()

    def cancel(self):
        with self._lock:
            if self.timer:
                self.timer.cancel()
                self.timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self.timer is not None


class ControlFileWatcher:
    """
    Watches the working directory for the Majdata control file and hands its
    contents to the host's load routine.

    The host must expose ``dispatcher.begin_invoke(fn, *args)`` and
    ``init_from_file(folder_path, maidata_filename, track_filename)``.
    """

    def __init__(
        self,
        host,
        watch_dir: Optional[Path] = None,
        control_file_name: str = CONTROL_FILE_NAME,
        debounce_seconds: float = 0.5,
    ):
        self.host = host
        self.logger = logging.getLogger(__name__)
        self.control_file_name = control_file_name
        self.watch_dir = Path(watch_dir).absolute() if watch_dir else Path.cwd()
        self.control_file_path = self.watch_dir / control_file_name
        self.state = WatcherState.NOT_STARTED
        self.observer: Optional[Observer] = None
        self.handler = ControlFileHandler(control_file_name, self._on_timer_tick, debounce_seconds)

        self._is_processing = False
        self._processing_lock = threading.Lock()

        self.logger.info(f"{TAG} Initialized with control file path: {self.control_file_path}")

    @property
    def is_processing(self) -> bool:
        with self._processing_lock:
            return self._is_processing

    def start_watching(self):
        if self.observer and self.observer.is_alive():
            self.logger.warning(f"{TAG} Already watching for {self.control_file_name}")
            return

        try:
            if not self.watch_dir.is_dir():
                raise FileNotFoundError(f"Watch directory not found: {self.watch_dir}")

            # Observers cannot be restarted, so every start gets a fresh one
            observer = Observer()
            observer.schedule(self.handler, str(self.watch_dir), recursive=False)
            observer.start()
            self.observer = observer
            self.state = WatcherState.WATCHING
            self.logger.info(f"{TAG} Started watching for {self.control_file_name}")

            if self.control_file_path.exists():
                self.logger.info(f"{TAG} Control file already exists, processing...")
                self.host.dispatcher.begin_invoke(self.process_control_file)
        except Exception as e:
            self.logger.error(f"{TAG} Error starting watcher: {e}")

    def stop_watching(self):
        if self.observer is not None:
            observer, self.observer = self.observer, None
            try:
                observer.stop()
                if observer.is_alive():
                    observer.join()
            except Exception as e:
                self.logger.error(f"{TAG} Error stopping watcher: {e}")
            self.logger.info(f"{TAG} Stopped watching for {self.control_file_name}")

        if self.state is WatcherState.WATCHING:
            self.state = WatcherState.STOPPED
        self.handler.cancel()

    def dispose(self):
        self.stop_watching()
        self.handler.cancel()

    def _on_timer_tick(self):
        if self.state is not WatcherState.WATCHING:
            return
        self.host.dispatcher.begin_invoke(self.process_control_file)

    def _try_begin(self) -> bool:
        with self._processing_lock:
            if self._is_processing:
                return False
            self._is_processing = True
            return True

    def _end(self):
        with self._processing_lock:
            self._is_processing = False

    def process_control_file(self):
        if not self._try_begin():
            self.logger.info(f"{TAG} Already processing, skipping...")
            return

        try:
            if not self.control_file_path.exists():
                self.logger.info(f"{TAG} Control file not found: {self.control_file_path}")
                self._end()
                return

            self.logger.info(f"{TAG} Reading control file: {self.control_file_path}")
            lines = read_control_lines(self.control_file_path)

            try:
                record = parse_control_lines(lines)
            except ControlFileFormatError as e:
                self.logger.error(f"{TAG} Invalid control file format: {e}")
                if e.actual:
                    self.logger.error(f"  Expected: {', '.join(repr(x) for x in e.expected)}")
                    self.logger.error(f"  Got: {', '.join(repr(x) for x in e.actual)}")
                self._end()
                return

            self.logger.info(
                f"{TAG} Parsed control file: folder={record.folder_path!r}, "
                f"maidata={record.maidata_filename!r}, track={record.track_filename!r}"
            )

            if not os.path.isdir(record.folder_path):
                self.logger.error(f"{TAG} Folder does not exist: {record.folder_path}")
                self._end()
                return

            # Deleting is the only acknowledgement the writer gets
            try:
                self.control_file_path.unlink()
                self.logger.info(f"{TAG} Control file deleted: {self.control_file_path}")
            except OSError as e:
                self.logger.warning(f"{TAG} Warning: Could not delete control file: {e}")

            self.logger.info(f"{TAG} Loading data from folder: {record.folder_path}")
            self.host.dispatcher.begin_invoke(
                self._load, record.folder_path, record.maidata_filename, record.track_filename
            )
        except Exception as e:
            self.logger.error(f"{TAG} Error processing control file: {e}")
            self._end()

    def _load(self, folder_path: str, maidata_filename: str, track_filename: str):
        # The guard stays up until the host has finished loading
        try:
            self.host.init_from_file(folder_path, maidata_filename, track_filename)
            self.logger.info(f"{TAG} Successfully loaded data from {folder_path}")
        except Exception as e:
            self.logger.error(f"{TAG} Error loading data: {e}")
        finally:
            self._end()
