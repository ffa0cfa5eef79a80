# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import threading
from pathlib import Path
from unittest.mock import MagicMock
from src.host.dispatcher import Dispatcher
from src.services.watch_service import ControlFileWatcher

CONTROL_NAME = "HachimiDX-Convert-Majdata-Control.txt"


def write_control(directory: Path, folder, maidata="maidata.txt", track="track.mp3", extra=""):
    path = directory / CONTROL_NAME
    path.write_text(f"folder: {folder}\nmaidata: {maidata}\ntrack: {track}\n{extra}", encoding="utf-8")
    return path


def flush(dispatcher: Dispatcher):
    """Waits until everything queued so far has run on the dispatcher."""
    dispatcher.invoke(lambda: None, timeout=5)


@pytest.fixture
def watch_dir(tmp_path):
    d = tmp_path / "watch"
    d.mkdir()
    return d

@pytest.fixture
def chart_dir(tmp_path):
    d = tmp_path / "chart"
    d.mkdir()
    (d / "maidata.txt").write_text("&title=Test\n", encoding="utf-8")
    (d / "track.mp3").write_bytes(b"\x00")
    return d

@pytest.fixture
def dispatcher():
    d = Dispatcher()
    d.start()
    yield d
    d.stop()

@pytest.fixture
def host(dispatcher):
    host = MagicMock()
    host.dispatcher = dispatcher
    host.loaded = threading.Event()
    host.init_from_file.side_effect = lambda *args: host.loaded.set()
    return host

@pytest.fixture
def watcher(host, watch_dir):
    w = ControlFileWatcher(host, watch_dir=watch_dir, debounce_seconds=0.1)
    yield w
    w.dispose()

@pytest.fixture
def control_writer(watch_dir):
    return lambda folder, **kwargs: write_control(watch_dir, folder, **kwargs)

@pytest.fixture
def flush_dispatcher(dispatcher):
    return lambda: flush(dispatcher)
