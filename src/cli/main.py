# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from pathlib import Path
from rich.console import Console
from rich.table import Table
from ..core.config import CONTROL_FILE_NAME
from ..core.control_file import ControlFileFormatError, read_control_file, write_control_file
from ..core.models import ControlFileRecord

app = typer.Typer(help="Majdata Control Watcher - open converted charts in the editor.")
console = Console()


@app.command("send")
def send(
    folder: str,
    maidata: str,
    track: str,
    watch_dir: Path = typer.Option(Path("."), help="Directory the editor is watching."),
    name: str = CONTROL_FILE_NAME,
):
    """
    Write a control file asking a running editor to load a chart.
    """
    if not Path(folder).is_dir():
        console.print(f"[yellow]Warning:[/yellow] folder [cyan]{folder}[/cyan] does not exist, the editor will ignore it.")

    record = ControlFileRecord(folder_path=folder, maidata_filename=maidata, track_filename=track)
    try:
        target = write_control_file(watch_dir, record, name)
    except OSError as e:
        console.print(f"[red]Error writing control file:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Control file written:[/green] {target}")


@app.command("check")
def check(path: Path = typer.Argument(Path(CONTROL_FILE_NAME), help="Control file to validate.")):
    """
    Parse a control file without consuming it.
    """
    if not path.is_file():
        console.print(f"[red]Control file not found:[/red] {path}")
        raise typer.Exit(1)

    try:
        record = read_control_file(path)
    except ControlFileFormatError as e:
        console.print(f"[red]Invalid control file format:[/red] {e}")
        if e.actual:
            console.print(f"  Expected: {e.expected}")
            console.print(f"  Got: {e.actual}")
        raise typer.Exit(1)

    table = Table(title=str(path))
    table.add_column("Field", style="magenta")
    table.add_column("Value", style="cyan")
    table.add_row("folder", record.folder_path)
    table.add_row("maidata", record.maidata_filename)
    table.add_row("track", record.track_filename)
    console.print(table)

    if not Path(record.folder_path).is_dir():
        console.print("[yellow]Folder does not exist, the watcher would skip this file.[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
