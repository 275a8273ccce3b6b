"""CLI entry point for maps-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.allowlist import ALLOWED_PREFIXES
from core.config import CONFIG_FILE, load_config
from services.upstream import UPSTREAM_TIMEOUT
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, LOG_ROOT, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    plain = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Logs:[/bold] {LOG_ROOT}")
            console.print(
                f"[bold]Hosting:[/bold] region={config.hosting.region} "
                f"timeout={config.hosting.timeout_seconds}s"
            )
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        else:
            console.print(f"[red][ERROR][/red] Unknown option: {arg}")
            _print_help()
            sys.exit(2)

    if config.hosting.timeout_seconds <= UPSTREAM_TIMEOUT:
        console.print(
            f"[yellow]Warning:[/yellow] hosting.timeout_seconds ({config.hosting.timeout_seconds}) "
            f"should exceed the {UPSTREAM_TIMEOUT:.0f}s upstream timeout"
        )

    # Clear previous logs and start the logger
    clear_logs()
    dashboard = None if plain else Dashboard(config)
    logger = ConsoleLogger(console=console) if dashboard is None else dashboard

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        console.print(f"[bold cyan]Maps Relay[/bold cyan] on {config.proxy.host}:{config.proxy.port}")
        console.print(f"[dim]Allowed: {', '.join(ALLOWED_PREFIXES)}[/dim]")
        console.print(f"[dim]Log file: {CLI_LOG_FILE}[/dim]")
    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", port=config.proxy.port, region=config.hosting.region)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Maps Relay[/bold cyan]

Forwards browser requests to Google Maps / Places APIs from a fixed region.

[bold]Usage:[/bold]
    maps-relay              Start with live dashboard
    maps-relay --plain      Start without dashboard (console log lines)
    maps-relay --config     Show config and log locations
    maps-relay --help       Show this help

[bold]Requests:[/bold]
    GET  /?url=<percent-encoded target>
    POST /  {"url": "...", "body": "...", "apiKey": "..."}
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
