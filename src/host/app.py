# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional
from ..core.config import Config
from ..core.models import LoadedProject
from ..services.watch_service import ControlFileWatcher
from .dispatcher import Dispatcher


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


class EditorHost:
    """
    Headless stand-in for the editor window: owns the dispatcher the
    watcher posts onto and the load routine it calls.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.logger = logging.getLogger("src.host.app")
        self.dispatcher = Dispatcher()
        self.project: Optional[LoadedProject] = None
        self._listeners: List[Callable[[LoadedProject], None]] = []
        self._stop_event = threading.Event()

        self.watcher = ControlFileWatcher(
            self,
            watch_dir=self.config.watch_dir,
            control_file_name=self.config.control_file_name,
            debounce_seconds=self.config.debounce_seconds,
        )

    def on_project_loaded(self, listener: Callable[[LoadedProject], None]):
        self._listeners.append(listener)

    def init_from_file(self, folder_path: str, maidata_filename: str, track_filename: str):
        folder = Path(folder_path)
        maidata_path = folder / maidata_filename
        track_path = folder / track_filename

        if not maidata_path.is_file():
            raise FileNotFoundError(f"maidata file not found: {maidata_path}")

        track_missing = not track_path.is_file()
        if track_missing:
            self.logger.warning(f"Track file not found, loading chart without audio: {track_path}")

        self.project = LoadedProject(
            folder=folder,
            maidata_path=maidata_path,
            track_path=track_path,
            track_missing=track_missing,
        )
        self.logger.info(f"Loaded project {maidata_path.name} from {folder}")

        for listener in self._listeners:
            listener(self.project)

    def start(self):
        self.dispatcher.start()
        self.watcher.start_watching()

    def close(self):
        self.watcher.dispose()
        self.dispatcher.stop()

    def request_stop(self):
        self._stop_event.set()

    def run(self):
        """Runs until request_stop() or Ctrl-C."""
        self.start()
        try:
            while not self._stop_event.wait(1.0):
                pass
        except KeyboardInterrupt:
            self.logger.info("Interrupted, shutting down...")
        finally:
            self.close()
