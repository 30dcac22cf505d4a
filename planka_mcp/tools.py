"""MCP tool definitions and executor for the Planka API.

This module re-exports from tool_schemas and tool_executor so both servers share one import.
"""

from .tool_executor import ToolExecutor
from .tool_schemas import ACTION_REQUIREMENTS, TOOLS

__all__ = ["ACTION_REQUIREMENTS", "TOOLS", "ToolExecutor"]
