"""
Planka MCP - Planka kanban REST API exposed as MCP tools.
"""

from .accessor import ResourceAccessor
from .activity import get_activity_feed, resolve_users
from .board_summary import get_board_summary
from .client import PlankaAPIError, PlankaClient
from .composite import CardCreationResult, create_card_with_tasks
from .config import ServerConfig
from .logging_config import configure_logging
from .task_index import TaskCardIndex
from .tools import TOOLS, ToolExecutor

__all__ = [
    "PlankaClient",
    "PlankaAPIError",
    "ResourceAccessor",
    "TaskCardIndex",
    "TOOLS",
    "ToolExecutor",
    "get_activity_feed",
    "resolve_users",
    "get_board_summary",
    "create_card_with_tasks",
    "CardCreationResult",
    "ServerConfig",
    "configure_logging",
]
__version__ = "1.0.0"
