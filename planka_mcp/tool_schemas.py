"""MCP tool schema definitions for the Planka adapter.

This module contains only the tool definitions (pure data) so that both
transports (stdio and HTTP) list exactly the same tools.
"""

from .models import LABEL_COLORS

# Tool definitions for MCP
TOOLS = [
    {
        "name": "mcp_kanban_project_board_manager",
        "description": "Manage projects and boards. Use get_board_summary for a full snapshot of one board (lists, cards, labels, statistics and a suggested next action).",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": [
                        "get_projects",
                        "get_project",
                        "get_boards",
                        "create_board",
                        "get_board",
                        "update_board",
                        "delete_board",
                        "get_board_summary",
                    ],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the project or board"},
                "projectId": {"type": "string", "description": "The ID of the project"},
                "name": {"type": "string", "description": "The name of the board"},
                "position": {"type": "number", "description": "The position of the board"},
                "type": {"type": "string", "description": "The type of the board"},
                "page": {"type": "number", "description": "The page number for pagination (1-indexed)"},
                "perPage": {"type": "number", "description": "The number of items per page"},
                "boardId": {"type": "string", "description": "The ID of the board to get a summary for"},
                "includeTaskDetails": {
                    "type": "boolean",
                    "description": "Whether to include detailed task information for each card (default: false)",
                },
                "includeComments": {
                    "type": "boolean",
                    "description": "Whether to include comments for each card (default: false)",
                },
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_list_manager",
        "description": "Manage kanban lists (board columns).",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_all", "create", "update", "delete", "get_one"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the list"},
                "boardId": {"type": "string", "description": "The ID of the board"},
                "name": {"type": "string", "description": "The name of the list"},
                "position": {"type": "number", "description": "The position of the list"},
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_card_manager",
        "description": "Manage kanban cards. create_with_tasks creates a card, its tasks and an optional comment in one call; it is NOT atomic: if a task or the comment fails, the card and earlier tasks are kept and the response reports 'complete': false with the failed step.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": [
                        "get_all",
                        "create",
                        "get_one",
                        "update",
                        "move",
                        "duplicate",
                        "delete",
                        "create_with_tasks",
                        "get_details",
                    ],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the card"},
                "listId": {"type": "string", "description": "The ID of the list"},
                "boardId": {"type": "string", "description": "The ID of the board (if moving between boards)"},
                "projectId": {"type": "string", "description": "The ID of the project (if moving between projects)"},
                "name": {"type": "string", "description": "The name of the card"},
                "description": {"type": "string", "description": "The description of the card"},
                "position": {"type": "number", "description": "The position of the card"},
                "dueDate": {"type": "string", "description": "The due date for the card (ISO format)"},
                "isCompleted": {"type": "boolean", "description": "Whether the card is completed"},
                "type": {"type": "string", "description": "Card type (e.g., 'project', 'story')"},
                "tasks": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Task names to create, in order (create_with_tasks)",
                },
                "comment": {"type": "string", "description": "Optional comment to add to the card (create_with_tasks)"},
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_stopwatch",
        "description": "Manage card stopwatches for time tracking.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["start", "stop", "get", "reset"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the card"},
            },
            "required": ["action", "id"],
        },
    },
    {
        "name": "mcp_kanban_label_manager",
        "description": "Manage board labels and their assignment to cards. Removing a label that is not on the card succeeds without changes.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_all", "create", "update", "delete", "add_to_card", "remove_from_card"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the label"},
                "boardId": {"type": "string", "description": "The ID of the board"},
                "cardId": {"type": "string", "description": "The ID of the card"},
                "labelId": {"type": "string", "description": "The ID of the label (for card operations)"},
                "name": {"type": "string", "description": "The name of the label"},
                "color": {"type": "string", "enum": list(LABEL_COLORS), "description": "The color of the label"},
                "position": {"type": "number", "description": "The position of the label"},
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_task_manager",
        "description": "Manage card tasks (checklist items). get_one needs cardId unless the task was created or listed earlier in this session.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_all", "create", "batch_create", "get_one", "update", "delete", "complete_task"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the task"},
                "cardId": {"type": "string", "description": "The ID of the card"},
                "name": {"type": "string", "description": "The name of the task"},
                "isCompleted": {"type": "boolean", "description": "Whether the task is completed"},
                "position": {"type": "number", "description": "The position of the task"},
                "tasks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "cardId": {"type": "string", "description": "The ID of the card for this task"},
                            "name": {"type": "string", "description": "The name of this task"},
                            "position": {"type": "number", "description": "The position of this task"},
                        },
                        "required": ["name"],
                    },
                    "description": "Array of tasks to create in batch",
                },
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_comment_manager",
        "description": "Manage card comments. get_one has no direct lookup in Planka and scans every card of every board, so it is slow on large installations; prefer get_all with a cardId.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_all", "create", "get_one", "update", "delete"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the comment"},
                "cardId": {"type": "string", "description": "The ID of the card"},
                "text": {"type": "string", "description": "The text content of the comment"},
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_membership_manager",
        "description": "Manage board memberships.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_all", "create", "get_one", "update", "delete"],
                    "description": "The action to perform",
                },
                "id": {"type": "string", "description": "The ID of the membership"},
                "boardId": {"type": "string", "description": "The ID of the board"},
                "userId": {"type": "string", "description": "The ID of the user"},
                "role": {"type": "string", "enum": ["editor", "viewer"], "description": "The role of the user in the board"},
                "canComment": {"type": "boolean", "description": "Whether the user can comment on the board"},
            },
            "required": ["action"],
        },
    },
    {
        "name": "mcp_kanban_activity_feed",
        "description": "Get activity feed showing recent changes in a project. Returns new/updated cards, comments, task completions within a time range. Use this to understand what changed without checking each card individually. Use resolve_users to turn the returned userIds into names.",
        "input_schema": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["get_activity", "resolve_users"],
                    "description": "The action to perform",
                },
                "projectId": {
                    "type": "string",
                    "description": "The ID of the project to get activity for (required for get_activity)",
                },
                "since": {"type": "string", "description": "ISO date string - start of time range (defaults to 24h ago)"},
                "until": {"type": "string", "description": "ISO date string - end of time range (defaults to now)"},
                "maxComments": {
                    "type": "number",
                    "description": "Maximum number of comment entries to return (default: 20)",
                },
                "userIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Array of user IDs to resolve (for resolve_users action)",
                },
            },
            "required": ["action"],
        },
    },
]

# Parameters each action needs on top of the schema's own 'required' list
ACTION_REQUIREMENTS: dict[str, dict[str, list[str]]] = {
    "mcp_kanban_project_board_manager": {
        "get_projects": ["page", "perPage"],
        "get_project": ["id"],
        "get_boards": ["projectId"],
        "create_board": ["projectId", "name", "position"],
        "get_board": ["id"],
        "update_board": ["id", "name", "position"],
        "delete_board": ["id"],
        "get_board_summary": ["boardId"],
    },
    "mcp_kanban_list_manager": {
        "get_all": ["boardId"],
        "create": ["boardId", "name", "position"],
        "get_one": ["id"],
        "update": ["id", "name", "position"],
        "delete": ["id"],
    },
    "mcp_kanban_card_manager": {
        "get_all": ["listId"],
        "create": ["listId", "name"],
        "get_one": ["id"],
        "update": ["id"],
        "move": ["id", "listId", "position"],
        "duplicate": ["id", "position"],
        "delete": ["id"],
        "create_with_tasks": ["listId", "name"],
        "get_details": ["id"],
    },
    "mcp_kanban_stopwatch": {
        "start": ["id"],
        "stop": ["id"],
        "get": ["id"],
        "reset": ["id"],
    },
    "mcp_kanban_label_manager": {
        "get_all": ["boardId"],
        "create": ["boardId", "name", "color", "position"],
        "update": ["id", "name", "color", "position"],
        "delete": ["id"],
        "add_to_card": ["cardId", "labelId"],
        "remove_from_card": ["cardId", "labelId"],
    },
    "mcp_kanban_task_manager": {
        "get_all": ["cardId"],
        "create": ["cardId", "name"],
        "batch_create": ["tasks"],
        "get_one": ["id"],
        "update": ["id"],
        "delete": ["id"],
        "complete_task": ["id"],
    },
    "mcp_kanban_comment_manager": {
        "get_all": ["cardId"],
        "create": ["cardId", "text"],
        "get_one": ["id"],
        "update": ["id", "text"],
        "delete": ["id"],
    },
    "mcp_kanban_membership_manager": {
        "get_all": ["boardId"],
        "create": ["boardId", "userId", "role"],
        "get_one": ["id"],
        "update": ["id"],
        "delete": ["id"],
    },
    "mcp_kanban_activity_feed": {
        "get_activity": ["projectId"],
        "resolve_users": ["userIds"],
    },
}
