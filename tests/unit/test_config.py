# Copyright (c) 2025 Trae AI. All rights reserved.

from pathlib import Path
from src.core.config import Config, CONTROL_FILE_NAME


def test_defaults():
    config = Config()

    assert config.watch_dir is None
    assert config.control_file_name == CONTROL_FILE_NAME == "HachimiDX-Convert-Majdata-Control.txt"
    assert config.debounce_ms == 500
    assert config.debounce_seconds == 0.5

def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"watch_dir: {tmp_path}\ndebounce_ms: 250\nlog_level: DEBUG\n",
        encoding="utf-8",
    )

    config = Config.load(str(path))

    assert config.watch_dir == Path(tmp_path)
    assert config.debounce_seconds == 0.25
    assert config.log_level == "DEBUG"
    assert config.control_file_name == CONTROL_FILE_NAME

def test_load_empty_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert Config.load(str(path)) == Config()
