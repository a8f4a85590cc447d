"""Integration tests for the HTTP boundary of the Real Browser MCP Server."""
from fastapi.testclient import TestClient

from real_browser_mcp.constants import SESSION_HEADER, ToolName
from real_browser_mcp.core.server import create_app
from real_browser_mcp.utils import get_logger
from tests.conftest import jsonrpc

logger = get_logger("test.integration.server")

PROTOCOL_VERSION = "2025-03-26"


def open_session(client: TestClient) -> str:
    response = client.post("/mcp", json=jsonrpc("initialize", {"protocolVersion": PROTOCOL_VERSION}))
    assert response.status_code == 200
    return response.headers[SESSION_HEADER]


def call_tool(client: TestClient, session_id: str, name: str, arguments=None, request_id: int = 2):
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return client.post("/mcp", json=jsonrpc("tools/call", params, request_id), headers={SESSION_HEADER: session_id})


class TestHealth:
    """Tests for the health probe."""

    def test_health_is_idempotent(self, client):
        logger.info("Testing health probe", emoji_key="test")

        for _ in range(3):
            response = client.get("/health")
            assert response.status_code == 200
            assert response.text == "Server is healthy"


class TestMcpEndpoint:
    """Tests for POST/DELETE/GET on the MCP endpoint."""

    def test_initialize_issues_session_and_echoes_version(self, client):
        logger.info("Testing initialize handshake", emoji_key="test")

        response = client.post("/mcp", json=jsonrpc("initialize", {"protocolVersion": "2024-11-05"}))

        assert response.status_code == 200
        assert response.headers[SESSION_HEADER]
        body = response.json()
        assert body["id"] == 1
        assert body["result"]["protocolVersion"] == "2024-11-05"
        assert body["result"]["serverInfo"]["name"] == "real-browser-mcp-server"

    def test_tools_list(self, client):
        session_id = open_session(client)

        response = client.post("/mcp", json=jsonrpc("tools/list", request_id=2), headers={SESSION_HEADER: session_id})

        assert response.status_code == 200
        assert response.headers[SESSION_HEADER] == session_id
        names = [tool["name"] for tool in response.json()["result"]["tools"]]
        assert names == [name.value for name in ToolName]

    def test_tool_call_success(self, client, calls):
        session_id = open_session(client)

        response = call_tool(client, session_id, "navigate", {"url": "https://example.com"})

        result = response.json()["result"]
        assert result["content"][0]["text"] == "Successfully navigated to https://example.com"
        assert not result.get("isError")
        assert calls == [(ToolName.NAVIGATE, {"url": "https://example.com"})]

    def test_unknown_tool_is_a_tool_failure(self, client):
        session_id = open_session(client)

        response = call_tool(client, session_id, "fly")

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"] == "❌ Tool execution failed: Unknown tool: fly"

    def test_failed_call_does_not_affect_the_next(self, client):
        session_id = open_session(client)

        failed = call_tool(client, session_id, "navigate", {"url": "not a url"}, request_id=2)
        succeeded = call_tool(client, session_id, "navigate", {"url": "https://example.com"}, request_id=3)

        assert failed.json()["result"]["isError"] is True
        assert succeeded.json()["id"] == 3
        assert not succeeded.json()["result"].get("isError")

    def test_malformed_json(self, client):
        response = client.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    def test_unexpected_error_with_markup_text(self, client, app_context, monkeypatch):
        async def crash(message, session_id=None):
            raise RuntimeError("transport closed [/pid=1]")

        monkeypatch.setattr(app_context.transport, "handle_exchange", crash)

        response = client.post("/mcp", json=jsonrpc("initialize", {"protocolVersion": PROTOCOL_VERSION}))

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    def test_missing_session_header(self, client):
        response = client.post("/mcp", json=jsonrpc("tools/list"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32000

    def test_unknown_session(self, client):
        response = client.post("/mcp", json=jsonrpc("tools/list"), headers={SESSION_HEADER: "never-issued"})

        assert response.status_code == 404

    def test_delete_terminates_session(self, client):
        session_id = open_session(client)

        assert client.delete("/mcp", headers={SESSION_HEADER: session_id}).status_code == 204
        assert client.delete("/mcp", headers={SESSION_HEADER: session_id}).status_code == 404
        response = client.post("/mcp", json=jsonrpc("ping"), headers={SESSION_HEADER: session_id})
        assert response.status_code == 404

    def test_delete_requires_session_header(self, client):
        assert client.delete("/mcp").status_code == 400

    def test_get_is_not_allowed(self, client):
        response = client.get("/mcp")

        assert response.status_code == 405
        assert "POST" in response.headers["Allow"]

    def test_notification_is_accepted(self, client):
        session_id = open_session(client)

        response = client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "method": "notifications/initialized"},
            headers={SESSION_HEADER: session_id},
        )

        assert response.status_code == 202
        assert response.content == b""


class TestLifecycle:
    """Tests for cleanup when the server stops."""

    def test_shutdown_releases_browser(self, app_context, fake_browser):
        logger.info("Testing cleanup on server shutdown", emoji_key="test")

        with TestClient(create_app(app_context)) as client:
            assert client.get("/health").status_code == 200
            assert fake_browser.events == []

        assert fake_browser.events == ["close_browser", "force_kill_all_chrome_processes"]
        assert app_context.guard.completed
