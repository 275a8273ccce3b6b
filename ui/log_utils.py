"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.request_types import OutboundRequestSpec

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"
MAX_LOGGED_BODY = 2000


def describe_target(spec: OutboundRequestSpec) -> tuple[str, str]:
    """Return (api_name, path) for display, e.g. ("maps", "/maps/api/geocode/json")."""
    host = spec.host
    api = host.split(".", 1)[0]
    path = spec.target_url.split(host, 1)[-1].split("?", 1)[0] or "/"
    return api, path


def write_forward_log(
    spec: OutboundRequestSpec,
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single forwarded request log entry."""
    body = spec.body.decode("utf-8", errors="replace") if spec.body else None
    if body and len(body) > MAX_LOGGED_BODY:
        body = body[:MAX_LOGGED_BODY] + "..."
    payload = {
        "timestamp": _utc_now(),
        "method": spec.method,
        "target": _redact_query(spec.target_url),
        "headers": _redact_headers(spec.headers),
        "body": body,
    }
    return _write_json(log_root / "forward" / spec.host, payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path = CLI_LOG_FILE,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove logs from previous runs."""
    shutil.rmtree(log_root, ignore_errors=True)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if "key" in key.lower() or "authorization" in key.lower():
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _redact_query(url: str) -> str:
    """Mask a key= query parameter (legacy Maps web service auth)."""
    if "?" not in url:
        return url
    base, query = url.split("?", 1)
    parts = []
    for item in query.split("&"):
        name, sep, value = item.partition("=")
        if name == "key" and sep:
            value = _mask(value)
        parts.append(f"{name}{sep}{value}")
    return f"{base}?{'&'.join(parts)}"


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
