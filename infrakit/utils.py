"""Shared utility functions for infrakit.

Provides Rich-based console reporting with the ``[INFO]`` / ``[SUCCESS]`` /
``[WARNING]`` / ``[ERROR]`` prefix convention, JSON I/O and small
file-system helpers.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Prefixed log lines
# ---------------------------------------------------------------------------


def log_info(message: str) -> None:
    """Print a blue ``[INFO]`` line."""
    console.print(f"[bold blue]\\[INFO][/bold blue] {escape(message)}")


def log_success(message: str) -> None:
    """Print a green ``[SUCCESS]`` line."""
    console.print(f"[bold green]\\[SUCCESS][/bold green] {escape(message)}")


def log_warning(message: str) -> None:
    """Print a yellow ``[WARNING]`` line."""
    console.print(f"[bold yellow]\\[WARNING][/bold yellow] {escape(message)}")


def log_error(message: str) -> None:
    """Print a red ``[ERROR]`` line to standard error."""
    err_console.print(f"[bold red]\\[ERROR][/bold red] {escape(message)}")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str, subtitle: str = "") -> None:
    """Print the run banner.

    Args:
        title: Main banner text.
        subtitle: Optional second line rendered dimmed.
    """
    body = f"[bold bright_blue]{escape(title)}[/bold bright_blue]"
    if subtitle:
        body += f"\n[dim]{escape(subtitle)}[/dim]"
    console.print(Panel(body, border_style="bright_blue"))


def print_summary_table(
    rows: list[tuple[str, ...]],
    columns: tuple[str, ...],
    title: str = "Summary",
) -> None:
    """Print a summary table.

    Args:
        rows: One tuple of cell values per row.
        columns: Column headers; the first column is rendered dimmed.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for index, column in enumerate(columns):
        if index == 0:
            table.add_column(column, style="dim", no_wrap=True)
        else:
            table.add_column(column)

    for row in rows:
        table.add_row(*(str(cell) for cell in row))

    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    file_path.write_text(content + "\n", encoding="utf-8")
    return file_path


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def write_text(path: str | Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    return file_path


def backup_timestamp(now: datetime | None = None) -> str:
    """Return the ``YYYYmmdd_HHMMSS`` stamp used in backup file names."""
    return (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
