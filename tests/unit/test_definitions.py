"""Tests for the static tool registry."""
from real_browser_mcp.constants import ToolName
from real_browser_mcp.tools.definitions import CAPABILITIES, SERVER_INFO, TOOLS, TOOLS_BY_NAME


def input_schema(tool):
    return tool.model_dump(by_alias=True)["inputSchema"]


def test_one_descriptor_per_tool_name():
    names = [tool.name for tool in TOOLS]

    assert len(names) == len(set(names))
    assert set(names) == {name.value for name in ToolName}


def test_lookup_by_name():
    assert input_schema(TOOLS_BY_NAME[ToolName.NAVIGATE])["required"] == ["url"]
    assert len(TOOLS_BY_NAME) == len(TOOLS)


def test_schemas_are_objects_with_descriptions():
    for tool in TOOLS:
        schema = input_schema(tool)
        assert tool.description
        assert schema["type"] == "object"
        for required in schema.get("required", []):
            assert required in schema["properties"]


def test_server_identity_and_capabilities():
    assert SERVER_INFO.name == "real-browser-mcp-server"
    assert CAPABILITIES.tools is not None
    assert CAPABILITIES.resources is not None
    assert CAPABILITIES.prompts is not None
