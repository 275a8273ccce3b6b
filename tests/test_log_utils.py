import json

from rich.console import Console

from core.request_types import OutboundRequestSpec
from ui.console_logger import ConsoleLogger
from ui.log_utils import describe_target, write_cli_log, write_forward_log


def _spec():
    return OutboundRequestSpec(
        target_url="https://places.googleapis.com/v1/places:searchText?key=AIzaSyLONGSECRETKEY",
        method="POST",
        headers={"Content-Type": "application/json", "X-Goog-Api-Key": "AIzaSyLONGSECRETKEY"},
        body=b'{"textQuery":"coffee"}',
    )


def test_describe_target():
    assert describe_target(_spec()) == ("places", "/v1/places:searchText")


def test_forward_log_masks_credentials(tmp_path):
    path = write_forward_log(_spec(), log_root=tmp_path)

    assert path.parent == tmp_path / "forward" / "places.googleapis.com"
    entry = json.loads(path.read_text())
    assert entry["method"] == "POST"
    assert entry["headers"]["X-Goog-Api-Key"] == "AIzaSy...TKEY"
    assert entry["headers"]["Content-Type"] == "application/json"
    assert entry["target"].endswith("?key=AIzaSy...TKEY")
    assert entry["body"] == '{"textQuery":"coffee"}'


def test_cli_log_appends_lines(tmp_path):
    log_file = tmp_path / "proxy.log"

    write_cli_log("FORWARD", "GET /maps/api/geocode/json", log_file=log_file, api="maps")
    write_cli_log("ERROR", "Proxy failed: HTTP 403", log_file=log_file, route="maps.googleapis.com")

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("FORWARD: GET /maps/api/geocode/json api=maps")
    assert "route=maps.googleapis.com" in lines[1]


def test_console_logger_writes_console_and_file(tmp_path):
    console = Console(record=True, width=200)
    log_file = tmp_path / "proxy.log"
    logger = ConsoleLogger(console=console, log_file=log_file)

    logger.log_forward(_spec())
    logger.log_error("places.googleapis.com", 502, "Proxy failed: [HTTP] 403")

    output = console.export_text()
    assert "FORWARD places POST /v1/places:searchText" in output
    assert "ERROR places.googleapis.com 502: Proxy failed: [HTTP] 403" in output
    assert "status=502" in log_file.read_text()


def test_console_logger_survives_unwritable_log_file(tmp_path):
    blocker = tmp_path / "logs"
    blocker.write_text("not a directory")
    console = Console(record=True, width=200)
    logger = ConsoleLogger(console=console, log_file=blocker / "proxy.log")

    logger.log_forward(_spec())
    logger.log_error("relay", 400, "Missing url")

    output = console.export_text()
    assert "FORWARD places POST /v1/places:searchText" in output
    assert output.count("Warning: cannot write") == 2
