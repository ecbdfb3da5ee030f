"""MCP Server exposing pipeline outline tools."""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from . import config
from .tools.get_outline import get_outline as do_get_outline
from .tools.find_nodes import find_nodes as do_find_nodes
from .tools.get_property_values import get_property_values as do_get_property_values
from .tools.list_pipeline_files import list_pipeline_files as do_list_pipeline_files
from .tools.get_remote_outline import get_remote_outline as do_get_remote_outline

logger = logging.getLogger(__name__)

# Create MCP server
server = Server("pipeoutline-mcp")

_WORKSPACE_PROPERTY = {
    "type": "string",
    "description": "Optional workspace root; the file path must resolve inside it",
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="get_outline",
            description="""Get the outline of a pipeline YAML file.

Returns a tree of the structurally meaningful sections only: stage, job,
deployment, task and script entries. stages/steps/jobs arrays are folded
into their parents, and nothing inside a task is listed.

Every node carries a range covering its whole enclosing block.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the pipeline file",
                    },
                    "flat": {
                        "type": "boolean",
                        "description": "Return a pre-order list with depths instead of a tree",
                        "default": False,
                    },
                    "workspace": _WORKSPACE_PROPERTY,
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="find_nodes",
            description="""Find every occurrence of a key in a pipeline file.

Any key is accepted (e.g. "job", "template", "condition"). Results are in
document order and each range covers the object holding the key.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the pipeline file",
                    },
                    "key": {
                        "type": "string",
                        "description": "Property key to look for",
                    },
                    "workspace": _WORKSPACE_PROPERTY,
                },
                "required": ["path", "key"],
            },
        ),
        Tool(
            name="get_property_values",
            description="""Read the values nested under a property at a cursor position.

Finds the object enclosing the zero-based line/character position and
returns the name/value pairs under its `property_name` entry (for example
a task's "inputs"). values is null when that object has no such property
or has more than one.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the pipeline file",
                    },
                    "line": {
                        "type": "integer",
                        "description": "Zero-based line of the cursor",
                    },
                    "character": {
                        "type": "integer",
                        "description": "Zero-based character of the cursor",
                    },
                    "property_name": {
                        "type": "string",
                        "description": "Property to read (default: inputs)",
                        "default": "inputs",
                    },
                    "workspace": _WORKSPACE_PROPERTY,
                },
                "required": ["path", "line", "character"],
            },
        ),
        Tool(
            name="list_pipeline_files",
            description="""List pipeline YAML files in a local directory.

Respects .gitignore rules, skips sensitive files and files whose content
looks like it holds secrets. Reports the outline node count of each file.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to local directory",
                    },
                    "max_depth": {
                        "type": "integer",
                        "description": "Maximum directory depth to crawl (default: 5)",
                        "default": 5,
                    },
                    "include_hidden": {
                        "type": "boolean",
                        "description": "Whether to include hidden directories (starting with .)",
                        "default": False,
                    },
                    "follow_symlinks": {
                        "type": "boolean",
                        "description": "Whether to follow symbolic links (default: false for safety)",
                        "default": False,
                    },
                    "pipelines_only": {
                        "type": "boolean",
                        "description": "Leave out YAML files with an empty outline",
                        "default": True,
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="get_remote_outline",
            description="""Get the outline of a pipeline file in a GitHub repository.

Private repositories need the GITHUB_TOKEN environment variable.
Blocked in local-only mode (PIPEOUTLINE_LOCAL_ONLY=true).""",
            inputSchema={
                "type": "object",
                "properties": {
                    "repo": {
                        "type": "string",
                        "description": "GitHub repository URL or owner/repo string",
                    },
                    "path": {
                        "type": "string",
                        "description": "Path of the pipeline file within the repository",
                    },
                    "ref": {
                        "type": "string",
                        "description": "Branch, tag or commit (default branch if omitted)",
                    },
                    "flat": {
                        "type": "boolean",
                        "description": "Return a pre-order list with depths instead of a tree",
                        "default": False,
                    },
                },
                "required": ["repo", "path"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "get_outline":
            result = do_get_outline(
                path=arguments["path"],
                workspace=arguments.get("workspace"),
                flat=arguments.get("flat", False),
            )
        elif name == "find_nodes":
            result = do_find_nodes(
                path=arguments["path"],
                key=arguments["key"],
                workspace=arguments.get("workspace"),
            )
        elif name == "get_property_values":
            result = do_get_property_values(
                path=arguments["path"],
                line=arguments["line"],
                character=arguments["character"],
                property_name=arguments.get("property_name", "inputs"),
                workspace=arguments.get("workspace"),
            )
        elif name == "list_pipeline_files":
            result = do_list_pipeline_files(
                path=arguments["path"],
                max_depth=arguments.get("max_depth", 5),
                include_hidden=arguments.get("include_hidden", False),
                follow_symlinks=arguments.get("follow_symlinks", False),
                pipelines_only=arguments.get("pipelines_only", True),
            )
        elif name == "get_remote_outline":
            result = await do_get_remote_outline(
                repo=arguments["repo"],
                path=arguments["path"],
                ref=arguments.get("ref"),
                flat=arguments.get("flat", False),
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        logger.exception("Tool %s failed", name)
        error_result = {"error": str(e)}
        return [TextContent(type="text", text=json.dumps(error_result, indent=2))]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main():
    """Entry point for the MCP server."""
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
