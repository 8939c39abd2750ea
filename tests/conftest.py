from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from crowstorm.main import create_app
from crowstorm.settings import Settings

INDEX_BODY = b"<!doctype html><title>crowstorm</title>"
JS_BODY = b"console.log('hi');\n"
CSS_BODY = b"body { margin: 0; }\n"


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_bytes(INDEX_BODY)
    (root / "app.js").write_bytes(JS_BODY)
    (root / "css" / "site.css").write_bytes(CSS_BODY)
    (root / "blob.unknownext").write_bytes(b"\x00\x01\x02")
    (root / "LICENSE").write_bytes(b"MIT\n")
    return root


@pytest.fixture
def settings(tmp_path: Path, asset_root: Path) -> Settings:
    return Settings(
        asset_root=asset_root,
        data_dir=tmp_path / "data",
        source_list=tmp_path / "symbol_locations.txt",
        prefetch_on_startup=False,
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.fixture
def source_list(tmp_path: Path) -> Path:
    path = tmp_path / "symbol_locations.txt"
    path.write_text("# comment\nNASDAQ\n\nNYSE\n", encoding="utf-8")
    return path


@pytest.fixture
def mock_http():
    """Build httpx clients that answer from a handler instead of the network."""
    clients: list[httpx.Client] = []

    def factory(handler) -> httpx.Client:
        c = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(c)
        return c

    yield factory
    for c in clients:
        c.close()
