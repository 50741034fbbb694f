from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
from pathlib import Path
import threading
from typing import Iterator

import pytest

from clitestpack.session import SessionConfig
from clitestpack.stores import Services

CLI_SCRIPT = Path(__file__).parent / "fixtures" / "cli" / "azure_cli.py"


@dataclass
class ManagementServer:
    base_url: str
    vms: list[dict] = field(default_factory=list)
    requests_seen: list[tuple[str, str, str]] = field(default_factory=list)


@contextmanager
def _management_server() -> Iterator[ManagementServer]:
    state = ManagementServer(base_url="")

    class Handler(BaseHTTPRequestHandler):
        server_version = "ClitestManagement/1.0"

        def _send_json(self, payload: object, status: int = 200) -> None:
            body = json.dumps(payload).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self) -> None:  # noqa: N802 - http.server naming convention
            state.requests_seen.append(("GET", self.path, ""))
            if self.path.split("?", 1)[0].endswith("/services/vms"):
                self._send_json(state.vms)
                return
            self._send_json({"ok": True, "path": self.path})

        def do_POST(self) -> None:  # noqa: N802 - http.server naming convention
            content_length = int(self.headers.get("Content-Length", "0"))
            raw = self.rfile.read(content_length) if content_length else b""
            text = raw.decode("utf-8")
            state.requests_seen.append(("POST", self.path, text))
            payload = json.loads(text) if text else {}
            if self.path.split("?", 1)[0].endswith("/services/vms"):
                vm = {"name": payload.get("name")}
                state.vms.append(vm)
                self._send_json(vm, status=201)
                return
            self._send_json({"ok": True, "path": self.path, "body": payload})

        def log_message(self, _format: str, *_args: object) -> None:
            return

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    host, port = server.server_address
    state.base_url = f"http://{host}:{port}"
    try:
        yield state
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


@pytest.fixture()
def management_server() -> Iterator[ManagementServer]:
    with _management_server() as state:
        yield state


@pytest.fixture()
def azure_home(tmp_path: Path) -> Path:
    home = tmp_path / "azure"
    home.mkdir()
    return home


@pytest.fixture()
def services(azure_home: Path) -> Services:
    return Services.default({"AZURE_CONFIG_DIR": str(azure_home)})


@pytest.fixture()
def session_config(tmp_path: Path) -> SessionConfig:
    return SessionConfig(
        recordings_dir=tmp_path / "recordings",
        script=str(CLI_SCRIPT),
        subscription_id="sub1",
        certificate="test-cert",
        certificate_key="test-key",
    )
