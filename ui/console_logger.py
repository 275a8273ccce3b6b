"""Plain console logger for headless runs and serverless hosts."""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from core.request_types import OutboundRequestSpec
from ui.log_utils import CLI_LOG_FILE, describe_target, write_cli_log


class ConsoleLogger:
    """Write one line per event to stderr, optionally mirrored to the CLI log file."""

    def __init__(self, console: Console | None = None, log_file: Path | None = CLI_LOG_FILE):
        self._console = console or Console(stderr=True)
        self._log_file = log_file

    def log_forward(self, spec: OutboundRequestSpec) -> None:
        api, path = describe_target(spec)
        self._console.print(f"[cyan]FORWARD[/cyan] {api} {spec.method} {escape(path)}", highlight=False)
        self._mirror("FORWARD", f"{spec.method} {path}", api=api)

    def log_error(self, route: str, status: int, message: str) -> None:
        self._console.print(f"[red]ERROR[/red] {route} {status}: {escape(message)}", highlight=False)
        self._mirror("ERROR", message[:200], route=route, status=status)

    def _mirror(self, level: str, message: str, **extra: Any) -> None:
        """Append to the log file; a failed write is reported on the console only."""
        if not self._log_file:
            return
        try:
            write_cli_log(level, message, log_file=self._log_file, **extra)
        except OSError as e:
            self._console.print(f"[yellow]Warning:[/yellow] cannot write {self._log_file}: {escape(str(e))}", highlight=False)
