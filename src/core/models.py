# Copyright (c) 2025 Trae AI. All rights reserved.

from enum import Enum
from pathlib import Path
from pydantic import BaseModel


class WatcherState(Enum):
    NOT_STARTED = "not_started"
    WATCHING = "watching"
    STOPPED = "stopped"


class ControlFileRecord(BaseModel):
    """
    The three values carried by a control file.
    Built by a parse and handed straight to the host's load routine.
    """

    folder_path: str
    maidata_filename: str
    track_filename: str


class LoadedProject(BaseModel):
    folder: Path
    maidata_path: Path
    track_path: Path
    track_missing: bool = False
