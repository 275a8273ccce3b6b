"""Upstream allow-list - the only hosts the relay will ever call."""

from urllib.parse import urlsplit

ALLOWED_PREFIXES: tuple[str, ...] = (
    "https://maps.googleapis.com/",
    "https://places.googleapis.com/",
)


def is_allowed(url: object) -> bool:
    """Return True if url starts with an allowed prefix and resolves to its host."""
    if not isinstance(url, str) or not url:
        return False
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        return False

    try:
        parts = urlsplit(url)
        # Accessing .port raises ValueError on a malformed port
        port = parts.port
    except ValueError:
        return False

    for prefix in ALLOWED_PREFIXES:
        if not url.startswith(prefix):
            continue
        host = prefix[len("https://"):-1]
        return (
            parts.scheme == "https"
            and parts.netloc == host
            and parts.hostname == host
            and port is None
            and parts.path.startswith("/")
        )
    return False
