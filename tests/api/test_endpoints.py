"""
API endpoint tests.
"""

import pytest


class TestRootEndpoint:
    """Tests for / endpoint."""

    def test_root_lists_links(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["tools"] == "/tools"
        assert data["health"] == "/health"


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_ok(self, test_client):
        """Test health check returns healthy."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["search_providers"] == ["mock"]
        assert data["components"]["active_provider"] == "mock"
        assert data["components"]["tools"] == ["search", "fetch"]
        assert "version" in data


class TestToolsEndpoint:
    """Tests for /tools endpoint."""

    def test_lists_tool_definitions(self, test_client):
        response = test_client.get("/tools")

        assert response.status_code == 200
        tools = {tool["name"]: tool for tool in response.json()}
        assert set(tools) == {"search", "fetch"}
        assert tools["search"]["inputSchema"]["required"] == ["query"]
        assert tools["fetch"]["inputSchema"]["required"] == ["url"]


class TestExecuteEndpoint:
    """Tests for /tools/execute endpoint."""

    def test_search_call(self, test_client):
        response = test_client.post(
            "/tools/execute",
            json={"id": "call-1", "name": "search", "arguments": {"query": "python"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["toolCallId"] == "call-1"
        assert data["isError"] is False
        assert data["result"]["totalResults"] == 2
        assert data["content"][1]["type"] == "json"
        assert len(data["content"][1]["json"]) == 2

    def test_fetch_call(self, test_client):
        response = test_client.post(
            "/tools/execute",
            json={"id": "call-2", "name": "fetch", "arguments": {"url": "https://docs.example.com/api/foo"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isError"] is False
        assert data["result"]["title"] == "GlideRecord"
        assert data["result"]["metadata"]["breadcrumbs"] == ["Home", "API", "Foo"]

    @pytest.mark.parametrize(
        "payload,code",
        [
            ({"id": "c", "name": "browse", "arguments": {}}, "INVALID_ARGUMENT"),
            ({"id": "c", "name": "search", "arguments": {}}, "INVALID_ARGUMENT"),
            ({"id": "c", "name": "fetch", "arguments": {"url": "file:///etc/passwd"}}, "BLOCKED_URL"),
        ],
    )
    def test_errors_are_in_band(self, test_client, payload, code):
        response = test_client.post("/tools/execute", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["isError"] is True
        assert data["result"]["code"] == code
        assert data["content"][0]["text"].startswith(f"Error executing {payload['name']}:")

    def test_malformed_call_is_rejected(self, test_client):
        response = test_client.post("/tools/execute", json={"name": "search"})

        assert response.status_code == 422
