"""Console rendering and progress helpers for the s3drop CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from .models import DeleteResult, FileEntry, Notification, Rejection, UploadResult
from .utils.events import FileProgress


console = Console()


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]s3drop[/bold green]",
        subtitle="[dim]direct uploads[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_entries(entries: Iterable[FileEntry]) -> None:
    """Print the final state of every entry."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("Key", style="dim")

    palette = {"uploaded": "green", "upload_failed": "red"}
    for entry in entries:
        status = entry.status.value
        color = palette.get(status, "yellow")
        table.add_row(
            entry.filename,
            _human_size(entry.file.size),
            f"[{color}]{status}[/{color}]",
            entry.key or "-",
        )
    console.print(table)


class BatchUploadProgressDisplay:
    """Event-based console display for a batch of uploads."""

    def __init__(self, live: bool = True):
        self._active_tasks: Dict[str, TaskID] = {}
        self._stats: Dict[str, int] = {"uploaded": 0, "failed": 0, "rejected": 0}
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold green]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            expand=False,
            console=console,
        )
        self._use_live = live
        self._live: Optional[Live] = None

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def attach(self, orchestrator) -> None:
        """Subscribe to orchestrator events."""
        orchestrator.on_entry_added(self.on_entry_added)
        orchestrator.on_progress(self.on_progress)
        orchestrator.on_upload_complete(self.on_upload_complete)
        orchestrator.on_upload_fail(self.on_upload_fail)
        orchestrator.on_rejected(self.on_rejected)
        orchestrator.on_notify(self.on_notify)

    def _start_live(self) -> None:
        if not self._use_live or self._live is not None:
            return
        self._live = Live(
            self._progress,
            console=console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()

    def _stop_live(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None

    def _emit_timeline(self, status: str, name: str, detail: Optional[str] = None) -> None:
        stamp = time.strftime("%H:%M:%S")
        palette = {"DONE": "green", "FAIL": "red", "SKIP": "yellow", "INFO": "blue"}
        color = palette.get(status, "white")
        suffix = f" [dim]{detail}[/dim]" if detail else ""
        console.print(f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] {name}{suffix}")

    def _finish_task(self, entry_id: str) -> None:
        task_id = self._active_tasks.pop(entry_id, None)
        if task_id is not None:
            self._progress.remove_task(task_id)

    def on_entry_added(self, entry: FileEntry) -> None:
        self._start_live()
        self._active_tasks[entry.id] = self._progress.add_task(
            "upload",
            label=entry.filename[:60],
            total=max(entry.file.size, 1),
        )

    def on_progress(self, progress: FileProgress) -> None:
        task_id = self._active_tasks.get(progress.entry_id)
        if task_id is None or progress.total_bytes <= 0:
            return
        self._progress.update(task_id, completed=progress.bytes_uploaded, total=progress.total_bytes)

    def on_upload_complete(self, result: UploadResult) -> None:
        self._stats["uploaded"] += 1
        self._finish_task(result.entry_id)
        self._emit_timeline("DONE", result.filename, result.key)

    def on_upload_fail(self, result: UploadResult) -> None:
        self._stats["failed"] += 1
        self._finish_task(result.entry_id)
        self._emit_timeline("FAIL", result.filename, result.error)

    def on_rejected(self, rejection: Rejection) -> None:
        self._stats["rejected"] += 1
        self._emit_timeline("SKIP", rejection.filename, rejection.code.value)

    def on_notify(self, notification: Notification) -> None:
        color = "green" if notification.level == "success" else "red"
        console.print(f"[{color}]{notification.message}[/{color}]")

    def on_finish(self) -> None:
        self._stop_live()
        console.print(
            f"[bold]Finished[/bold] uploaded={self._stats['uploaded']} "
            f"failed={self._stats['failed']} rejected={self._stats['rejected']}"
        )


def render_delete_result(result: DeleteResult) -> None:
    if result.success:
        console.print(f"[green]Deleted:[/green] {result.key}")
    else:
        console.print(f"[red]Failed:[/red] {result.key} - {result.error}")
