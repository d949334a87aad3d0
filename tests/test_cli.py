from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig
from settings import get_settings


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.sent: List[Path] = []
        self.closed = False

    def send_event(self, path: Path) -> Dict[str, Any]:
        self.sent.append(path)
        return {"event_id": f"event-{len(self.sent)}", "readings": 1}

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def _event_file(tmp_path: Path, name: str = "event.json") -> Path:
    path = tmp_path / name
    path.write_text(
        json.dumps(
            {
                "device": "sensorA",
                "readings": [{"name": "temp", "id": "r1", "value": "23", "origin": 1000}],
            }
        )
    )
    return path


def test_send_posts_each_file(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)
    first = _event_file(tmp_path, "one.json")
    second = _event_file(tmp_path, "two.json")

    result = runner.invoke(app, ["--base-url", "http://ingest:9000/", "send", str(first), str(second)])

    assert result.exit_code == 0
    assert "Sending 2 event(s) to http://ingest:9000" in result.stdout
    assert "event_id=event-2" in result.stdout
    assert stub.sent == [first, second]
    assert stub.config.base_url == "http://ingest:9000"
    assert stub.closed is True


def test_api_client_posts_event_json(tmp_path) -> None:
    captured: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"event_id": "abc", "readings": 1})

    client = ApiClient(CLIConfig(base_url="http://ingest"))
    client._client = httpx.Client(base_url="http://ingest", transport=httpx.MockTransport(handler))
    try:
        payload = client.send_event(_event_file(tmp_path))
    finally:
        client.close()

    assert payload == {"event_id": "abc", "readings": 1}
    assert captured[0].url.path == "/edgex"
    assert json.loads(captured[0].content)["device"] == "sensorA"


def test_api_client_rejects_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    client = ApiClient(CLIConfig())
    try:
        with pytest.raises(typer.BadParameter):
            client.send_event(path)
    finally:
        client.close()


def test_api_client_exits_on_http_error(tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "Pipeline is full (1 events pending)."})

    client = ApiClient(CLIConfig(base_url="http://ingest"))
    client._client = httpx.Client(base_url="http://ingest", transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(typer.Exit):
            client.send_event(_event_file(tmp_path))
    finally:
        client.close()


def test_config_check_accepts_defaults(monkeypatch, runner: CliRunner, fresh_settings) -> None:
    monkeypatch.delenv("INFLUX_PRECISION", raising=False)

    result = runner.invoke(app, ["config", "check"])

    assert result.exit_code == 0
    assert "Configuration is valid." in result.stdout


def test_config_check_reports_invalid_precision(monkeypatch, runner: CliRunner, fresh_settings) -> None:
    monkeypatch.setenv("INFLUX_PRECISION", "minutes")

    result = runner.invoke(app, ["config", "check"])

    assert result.exit_code == 1
    assert "influx precision 'minutes' is invalid" in result.output


def test_config_show_masks_password(monkeypatch, runner: CliRunner, fresh_settings) -> None:
    monkeypatch.setenv("INFLUX_PASSWORD", "hunter2")
    monkeypatch.setenv("INFLUX_DATABASE", "plant")

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "influx_database: plant" in result.stdout
    assert "hunter2" not in result.stdout
    assert "influx_password: ********" in result.stdout


def test_serve_runs_uvicorn(monkeypatch, runner: CliRunner, fresh_settings) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_run(target: str, **kwargs: Any) -> None:
        calls.append({"target": target, **kwargs})

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = runner.invoke(app, ["serve", "--port", "8081"])

    assert result.exit_code == 0
    assert calls == [
        {"target": "app.main:app", "host": "0.0.0.0", "port": 8081, "log_config": None}
    ]


def test_serve_refuses_invalid_settings(monkeypatch, runner: CliRunner, fresh_settings) -> None:
    monkeypatch.setenv("SINK_BACKEND", "postgres")
    monkeypatch.setattr("uvicorn.run", lambda *args, **kwargs: pytest.fail("server started"))

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1
