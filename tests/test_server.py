"""Tests for the MCP server tool dispatch."""

import json

import pytest

from pipeoutline_mcp.server import call_tool, list_tools


@pytest.mark.asyncio
async def test_list_tools():
    tools = await list_tools()
    names = {tool.name for tool in tools}
    assert names == {
        "get_outline",
        "find_nodes",
        "get_property_values",
        "list_pipeline_files",
        "get_remote_outline",
    }


@pytest.mark.asyncio
async def test_get_outline_returns_json(pipeline_file):
    contents = await call_tool("get_outline", {"path": str(pipeline_file)})
    result = json.loads(contents[0].text)
    assert [c["key"] for c in result["outline"]["children"]] == ["stage", "stage"]


@pytest.mark.asyncio
async def test_property_values_default_name(inputs_file):
    contents = await call_tool("get_property_values", {"path": str(inputs_file), "line": 1, "character": 8})
    result = json.loads(contents[0].text)
    assert result["property"] == "inputs"
    assert result["values"]["command"] == "build"


@pytest.mark.asyncio
async def test_unknown_tool():
    contents = await call_tool("nope", {})
    assert json.loads(contents[0].text) == {"error": "Unknown tool: nope"}


@pytest.mark.asyncio
async def test_missing_argument_becomes_error():
    contents = await call_tool("find_nodes", {"path": "x.yml"})
    assert "error" in json.loads(contents[0].text)
