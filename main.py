# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from pathlib import Path
from typing import Optional
from src.cli.main import app as cli_app
from src.core.config import Config
from src.host.app import EditorHost, configure_logging

app = typer.Typer(help="Majdata Control Watcher - open converted charts in the editor.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)

@app.command("watch")
def run_watch(config_path: Optional[str] = None, watch_dir: Optional[Path] = None):
    """
    Run the editor host and watch for control files.
    """
    config = Config.load(config_path) if config_path else Config()
    if watch_dir is not None:
        config.watch_dir = watch_dir
    configure_logging("DEBUG" if config.verbose else config.log_level)

    host = EditorHost(config)
    host.run()

if __name__ == "__main__":
    app()
