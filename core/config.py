"""Configuration models and loading."""

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "maps-relay"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = True


class HostingSettings(BaseModel):
    """Platform placement; read by deployment tooling, never by the forwarder."""

    region: str = "us-central1"
    timeout_seconds: int = 30


class LimitSettings(BaseModel):
    keep_alive_timeout: int = 5
    max_connections: int = 100
    max_keepalive_connections: int = 20


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    hosting: HostingSettings = Field(default_factory=HostingSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed.

    A file that is not valid JSON or fails validation is moved aside to
    ``<name>.json.bak`` and replaced by the defaults.
    """
    if config_file.exists():
        try:
            return Config.model_validate_json(config_file.read_text())
        except ValidationError:
            config_file.replace(config_file.with_suffix(".json.bak"))

    return _write_default(config_file)


def _write_default(config_file: Path) -> Config:
    config = Config()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(config.model_dump_json(indent=2))
    return config
