"""Tests for caldav_bridge/api and the servers publishing it.

The shared ``api_state`` is pointed at the scripted client for every test.
"""

import json

import pytest
from fastapi.testclient import TestClient
from fastmcp import Client

from caldav_bridge.api import api_state, call_api, get_api_functions
from caldav_bridge.services.http import app
from caldav_bridge.services.mcp import build_mcp_server

EXPECTED_TOOLS = {
    "build_resource_uri",
    "list_available_tools",
    "list_resource_templates",
    "read_caldav_resource",
    "validate_resource_uri",
}


@pytest.fixture(autouse=True)
def scripted_client(fake_client):
    api_state.context.set_client(fake_client)
    yield fake_client
    api_state.context.handler.clear_discovery_cache()


class TestRegistry:
    def test_registered_functions(self):
        assert {func.name for func in get_api_functions()} == EXPECTED_TOOLS

    def test_parameter_schema(self):
        (read,) = [func for func in get_api_functions() if func.name == "read_caldav_resource"]
        assert read.is_async is True
        assert read.parameter_schema == {
            "type": "object",
            "properties": {"uri": {"type": "string"}, "timeout_ms": {"type": "integer"}},
            "required": ["uri"],
        }
        assert read.describe()["category"] == "resources"

    async def test_unknown_function(self):
        with pytest.raises(KeyError):
            await call_api("does_not_exist")


class TestEndpoints:
    async def test_read_resource(self):
        result = await call_api("read_caldav_resource", uri="caldav://users/john/calendar1/event1%40example.com")
        assert result["status"] == 200
        assert result["mimeType"] == "text/calendar"
        assert "UID:event1@example.com" in result["content"]

    async def test_read_resource_failure_is_a_payload(self):
        result = await call_api("read_caldav_resource", uri="caldav://invalid/structure")
        assert result["status"] == 400
        assert result["mimeType"] == "application/json"
        assert json.loads(result["content"])["error"].startswith("No matching template found")

    async def test_list_templates(self):
        result = await call_api("list_resource_templates")
        assert [template["name"] for template in result["templates"]][0] == "components-range"
        assert result["matchingOrder"][0] == "components-by-cat"
        assert result["templates"][0]["uriTemplate"].startswith("caldav://{principal}")

    async def test_build_uri(self):
        result = await call_api(
            "build_resource_uri",
            template_name="components-by-cat",
            variables={"principal": "john", "calendarId": "tasks", "cat": "Work"},
        )
        assert result == {"uri": "caldav://john/tasks/VTODO?cat=Work"}

    async def test_validate_uri(self):
        valid = await call_api("validate_resource_uri", uri="caldav://john/_meta/calendars")
        assert valid == {
            "valid": True,
            "templateName": "metadata-list-cals",
            "mimeType": "application/json",
            "variables": {"principal": "john"},
        }
        invalid = await call_api("validate_resource_uri", uri="caldav://invalid/structure")
        assert invalid["valid"] is False

    async def test_list_available_tools_is_sorted(self):
        result = await call_api("list_available_tools")
        names = [tool["name"] for tool in result["tools"]]
        assert names == sorted(EXPECTED_TOOLS)


class TestHttpServer:
    @pytest.fixture
    def client(self):
        with TestClient(app) as client:
            yield client

    def test_lists_functions(self, client):
        response = client.get("/api/functions")
        assert response.status_code == 200
        assert {item["name"] for item in response.json()["functions"]} == EXPECTED_TOOLS

    def test_invokes_function(self, client):
        response = client.post(
            "/api/functions/build_resource_uri",
            json={"arguments": {"template_name": "metadata-list-cals", "variables": {"principal": "jane"}}},
        )
        assert response.status_code == 200
        assert response.json() == {"name": "build_resource_uri", "result": {"uri": "caldav://jane/_meta/calendars"}}

    def test_unknown_function_is_404(self, client):
        response = client.post("/api/functions/nope", json={})
        assert response.status_code == 404

    def test_failing_function_is_400(self, client):
        response = client.post(
            "/api/functions/build_resource_uri",
            json={"arguments": {"template_name": "component-by-uid", "variables": {}}},
        )
        assert response.status_code == 400
        assert "Missing required variable: principal" in response.json()["detail"]

    def test_serves_resource_with_its_media_type(self, client):
        response = client.get("/resources", params={"uri": "caldav://users/john/_meta/calendars"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["home"] == "/calendars/john/"

        response = client.get("/resources", params={"uri": "caldav://users/john/calendar1/VTODO?cat=work"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert "UID:todo1@example.com" in response.text

    def test_resource_errors_keep_status(self, client):
        response = client.get("/resources", params={"uri": "caldav://users/john/missing/uid"})
        assert response.status_code == 400
        assert response.json()["error"] == "Calendar not found: missing"


class TestMcpServer:
    async def test_exposes_every_api_function(self):
        async with Client(build_mcp_server()) as client:
            tools = await client.list_tools()
        assert {tool.name for tool in tools} == EXPECTED_TOOLS
