# Copyright (c) 2025 Trae AI. All rights reserved.

import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

CONTROL_FILE_NAME = "HachimiDX-Convert-Majdata-Control.txt"


class Config(BaseModel):
    watch_dir: Optional[Path] = None  # None -> current working directory
    control_file_name: str = CONTROL_FILE_NAME
    debounce_ms: int = 500
    log_level: str = "INFO"
    verbose: bool = False

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def load(cls, path: str = "config.yaml") -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
