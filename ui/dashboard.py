"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import OutboundRequestSpec
from ui.log_utils import describe_target, write_cli_log, write_forward_log

console = Console()


class ForwardInfo:
    """Info about a single forwarded request."""

    def __init__(self, api: str, method: str, path: str, has_key: bool, timestamp: datetime):
        self.api = api
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.has_key = has_key
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded requests and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[ForwardInfo] = []
        self._max_recent = 8
        self._request_count = {"maps": 0, "places": 0}
        self._error_count = 0
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(self, spec: OutboundRequestSpec) -> None:
        """Log a request about to be sent upstream."""
        with self._lock:
            api, path = describe_target(spec)
            self._request_count[api] = self._request_count.get(api, 0) + 1
            info = ForwardInfo(
                api=api,
                method=spec.method,
                path=path,
                has_key="X-Goog-Api-Key" in spec.headers,
                timestamp=datetime.now(),
            )
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]

            try:
                if self.config.proxy.debug:
                    write_forward_log(spec)
                write_cli_log("FORWARD", f"{spec.method} {path}", api=api)
            except OSError as e:
                self._note_log_failure(e)

            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._error_count += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            try:
                write_cli_log("ERROR", message[:200], route=route, status=status)
            except OSError as e:
                self._note_log_failure(e)
            self._refresh()

    def _note_log_failure(self, error: OSError) -> None:
        """Show a failed log write in the error panel instead of failing the request."""
        self._errors.insert(0, f"log write failed: {error}")
        self._errors = self._errors[:3]

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Maps Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Maps: {self._request_count.get('maps', 0)}", style="blue")
        stats.append("  |  ")
        stats.append(f"Places: {self._request_count.get('places', 0)}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._error_count}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("API", width=8)
            table.add_column("Method", width=6)
            table.add_column("Path", ratio=3)
            table.add_column("Key", width=4)

            for req in self._recent:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.api,
                    req.method,
                    req.path,
                    "yes" if req.has_key else "-",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Forwarded[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"GET http://{self.config.proxy.host}:{self.config.proxy.port}/?url=<encoded target>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
