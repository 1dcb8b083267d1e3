"""
Shared fixtures for the plugin backend and log client tests.
"""

import logging

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from logging_view_plugin.config import Settings
from logging_view_plugin.main import create_app


@pytest.fixture
def static_dir(tmp_path):
    """Compiled front-end assets."""
    root = tmp_path / "dist"
    root.mkdir()
    (root / "index.html").write_text("<html>console plugin</html>")
    (root / "plugin-entry.js").write_text("window.loadPluginEntry({});")
    (root / "plugin-manifest.json").write_text('{"name": "from-disk"}')
    (root / "main.chunk.js").write_text("console.log('chunk');")
    return root


@pytest.fixture
def make_settings(tmp_path, static_dir):
    def _make(**overrides):
        values = {
            "static_path": str(static_dir),
            "config_path": str(tmp_path / "config"),
            "plugin_config_path": str(tmp_path / "config" / "config.yaml"),
            "features": {"dev-console": True, "alerts": False},
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def write_plugin_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "config" / "config.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def test_logger():
    return logging.getLogger("logging_view_plugin.tests")


@pytest_asyncio.fixture
async def make_client(test_logger):
    """Build an app from settings and return an AsyncClient bound to it."""
    clients = []

    async def _make(settings: Settings, log_requests: bool = False) -> AsyncClient:
        app = create_app(settings, log=test_logger, log_requests=log_requests)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
