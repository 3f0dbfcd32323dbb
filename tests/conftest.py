"""
Pytest configuration and fixtures for tests.
"""
import json
import os

import httpx
import pytest

# Ensure tests never read the developer's local .env (which can include real credentials)
os.environ.setdefault("PYTEST_DISABLE_DOTENV", "1")

def gviz_body(cols, rows):
    """Wrap a gviz table payload the way the Sheets endpoint does."""
    payload = {
        "version": "0.6",
        "status": "ok",
        "table": {
            "cols": [{"id": chr(65 + idx), "label": label, "type": "string"} for idx, label in enumerate(cols)],
            "rows": [{"c": [None if value is None else {"v": value} for value in row]} for row in rows],
        },
    }
    return "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"


@pytest.fixture
def gviz():
    return gviz_body


@pytest.fixture
def make_settings():
    from labsite.api.config import Settings

    def _make(**overrides):
        return Settings(**overrides)

    return _make


@pytest.fixture
def sheet_transport():
    """Build an httpx.MockTransport from a routing table.

    ``routes`` maps ``("gviz" | "csv", gid)`` to either an ``httpx.Response`` or
    a string body. Unknown routes answer 404. Requests are recorded on
    ``transport.calls``.
    """

    def _build(routes):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            kind = "gviz" if request.url.path.endswith("/gviz/tq") else "csv"
            gid = request.url.params.get("gid")
            calls.append((kind, gid))
            result = routes.get((kind, gid))
            if result is None:
                return httpx.Response(404, text="not found")
            if isinstance(result, httpx.Response):
                return result
            return httpx.Response(200, text=result)

        transport = httpx.MockTransport(handler)
        transport.calls = calls
        return transport

    return _build
