"""Serverless ASGI entry point (Vercel Python runtime, Cloud Run, `uvicorn asgi:app`).

Uses built-in defaults and console-only logging; nothing is written to disk.
"""

from app import create_app
from core.config import Config
from ui.console_logger import ConsoleLogger

app = create_app(Config(), ConsoleLogger(log_file=None))
