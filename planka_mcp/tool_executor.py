"""Tool executor for MCP tools using the Planka API client."""

from typing import Any

from .activity import DEFAULT_MAX_COMMENTS, get_activity_feed, resolve_users
from .board_summary import get_board_summary
from .client import POSITION_GAP, PlankaClient
from .composite import create_card_with_tasks
from .tool_schemas import ACTION_REQUIREMENTS, TOOLS


def _get_required_params(tool_name: str) -> list[str]:
    """Get required parameters for a tool from its schema."""
    for tool in TOOLS:
        if tool["name"] == tool_name:
            return tool["input_schema"].get("required", [])
    return []


def _validate_tool_input(tool_name: str, tool_input: dict[str, Any]) -> None:
    """Validate that the tool's and the chosen action's required parameters are present.

    Raises:
        ValueError: If the action is unknown or a required parameter is missing
    """
    required = list(_get_required_params(tool_name))
    actions = ACTION_REQUIREMENTS.get(tool_name)
    action = tool_input.get("action")
    if actions is not None and action is not None:
        if action not in actions:
            raise ValueError(f"Unknown action: {action} for tool {tool_name}")
        required += [param for param in actions[action] if param not in required]

    missing = [param for param in required if tool_input.get(param) is None]
    if missing:
        raise ValueError(f"Missing required parameter(s): {', '.join(missing)}")


def _pick(tool_input: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Collect the given keys that the caller actually supplied."""
    return {key: tool_input[key] for key in keys if tool_input.get(key) is not None}


def _max_comments(tool_input: dict[str, Any]) -> int:
    # null means "use the default", like an omitted key
    value = tool_input.get("maxComments")
    return int(value) if value is not None else DEFAULT_MAX_COMMENTS


class ToolExecutor:
    """Executes tool calls using the Planka API client."""

    def __init__(self, client: PlankaClient):
        """Initialize with a configured API client."""
        self.client = client

    def execute(self, tool_name: str, tool_input: dict[str, Any]) -> Any:
        """
        Execute a tool call and return the result.

        Args:
            tool_name: Name of the tool to execute
            tool_input: Input parameters for the tool, including its 'action'

        Returns:
            JSON-serialisable result of the action

        Raises:
            ValueError: If the tool or action is not recognized or required params are missing
        """
        # Validate required parameters before executing
        _validate_tool_input(tool_name, tool_input)
        action = tool_input.get("action")

        match tool_name:
            case "mcp_kanban_project_board_manager":
                return self._project_board(action, tool_input)
            case "mcp_kanban_list_manager":
                return self._lists(action, tool_input)
            case "mcp_kanban_card_manager":
                return self._cards(action, tool_input)
            case "mcp_kanban_stopwatch":
                return self._stopwatch(action, tool_input)
            case "mcp_kanban_label_manager":
                return self._labels(action, tool_input)
            case "mcp_kanban_task_manager":
                return self._tasks(action, tool_input)
            case "mcp_kanban_comment_manager":
                return self._comments(action, tool_input)
            case "mcp_kanban_membership_manager":
                return self._memberships(action, tool_input)
            case "mcp_kanban_activity_feed":
                return self._activity(action, tool_input)
            case _:
                raise ValueError(f"Unknown tool: {tool_name}")

    def _project_board(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_projects":
                return self.client.list_projects(page=int(tool_input["page"]), per_page=int(tool_input["perPage"]))
            case "get_project":
                return self.client.get_project(tool_input["id"])
            case "get_boards":
                return self.client.list_boards(tool_input["projectId"])
            case "create_board":
                return self.client.create_board(
                    project_id=tool_input["projectId"],
                    name=tool_input["name"],
                    position=tool_input["position"],
                )
            case "get_board":
                board = self.client.get_board(tool_input["id"])
                if board is None:
                    raise ValueError(f"Board not found: {tool_input['id']}")
                return board
            case "update_board":
                return self.client.update_board(
                    tool_input["id"],
                    name=tool_input["name"],
                    position=tool_input["position"],
                    type=tool_input.get("type"),
                )
            case "delete_board":
                return self.client.delete_board(tool_input["id"])
            case "get_board_summary":
                return get_board_summary(
                    self.client,
                    tool_input["boardId"],
                    include_task_details=bool(tool_input.get("includeTaskDetails", False)),
                    include_comments=bool(tool_input.get("includeComments", False)),
                )
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _lists(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_lists(tool_input["boardId"])
            case "create":
                return self.client.create_list(
                    board_id=tool_input["boardId"],
                    name=tool_input["name"],
                    position=tool_input["position"],
                )
            case "get_one":
                return self.client.get_list(tool_input["id"])
            case "update":
                return self.client.update_list(tool_input["id"], name=tool_input["name"], position=tool_input["position"])
            case "delete":
                return self.client.delete_list(tool_input["id"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _cards(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_cards(tool_input["listId"], board_id=tool_input.get("boardId"))
            case "create":
                return self.client.create_card(
                    list_id=tool_input["listId"],
                    name=tool_input["name"],
                    description=tool_input.get("description", ""),
                    position=tool_input.get("position", POSITION_GAP),
                    type=tool_input.get("type", "project"),
                )
            case "get_one" | "get_details":
                return self.client.get_card(tool_input["id"])
            case "update":
                return self.client.update_card(
                    tool_input["id"],
                    **_pick(tool_input, "name", "description", "position", "dueDate", "isCompleted"),
                )
            case "move":
                return self.client.move_card(
                    tool_input["id"],
                    list_id=tool_input["listId"],
                    position=tool_input["position"],
                    board_id=tool_input.get("boardId"),
                    project_id=tool_input.get("projectId"),
                )
            case "duplicate":
                return self.client.duplicate_card(tool_input["id"], position=tool_input["position"])
            case "delete":
                return self.client.delete_card(tool_input["id"])
            case "create_with_tasks":
                result = create_card_with_tasks(
                    self.client,
                    list_id=tool_input["listId"],
                    name=tool_input["name"],
                    description=tool_input.get("description"),
                    tasks=tool_input.get("tasks"),
                    comment=tool_input.get("comment"),
                    position=tool_input.get("position"),
                    type=tool_input.get("type"),
                )
                return result.to_dict()
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _stopwatch(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "start":
                return self.client.start_stopwatch(tool_input["id"])
            case "stop":
                return self.client.stop_stopwatch(tool_input["id"])
            case "get":
                return self.client.get_stopwatch(tool_input["id"])
            case "reset":
                return self.client.reset_stopwatch(tool_input["id"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _labels(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_labels(tool_input["boardId"])
            case "create":
                return self.client.create_label(
                    board_id=tool_input["boardId"],
                    name=tool_input["name"],
                    color=tool_input["color"],
                    position=tool_input["position"],
                )
            case "update":
                return self.client.update_label(tool_input["id"], **_pick(tool_input, "name", "color", "position"))
            case "delete":
                return self.client.delete_label(tool_input["id"])
            case "add_to_card":
                return self.client.add_label_to_card(tool_input["cardId"], tool_input["labelId"])
            case "remove_from_card":
                return self.client.remove_label_from_card(tool_input["cardId"], tool_input["labelId"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _tasks(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_tasks(tool_input["cardId"])
            case "create":
                return self.client.create_task(
                    tool_input["cardId"],
                    tool_input["name"],
                    position=tool_input.get("position", POSITION_GAP),
                )
            case "batch_create":
                tasks = []
                for index, task in enumerate(tool_input["tasks"]):
                    card_id = task.get("cardId") or tool_input.get("cardId")
                    if not card_id:
                        raise ValueError(f"Missing cardId for task {index + 1}")
                    tasks.append({**task, "cardId": card_id})
                return self.client.batch_create_tasks(tasks)
            case "get_one":
                return self.client.get_task(tool_input["id"], card_id=tool_input.get("cardId"))
            case "update":
                return self.client.update_task(tool_input["id"], **_pick(tool_input, "name", "isCompleted", "position"))
            case "delete":
                return self.client.delete_task(tool_input["id"])
            case "complete_task":
                return self.client.complete_task(tool_input["id"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _comments(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_comments(tool_input["cardId"])
            case "create":
                return self.client.create_comment(tool_input["cardId"], tool_input["text"])
            case "get_one":
                return self.client.scan_for_comment(tool_input["id"])
            case "update":
                return self.client.update_comment(tool_input["id"], tool_input["text"])
            case "delete":
                return self.client.delete_comment(tool_input["id"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _memberships(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_all":
                return self.client.list_board_memberships(tool_input["boardId"])
            case "create":
                return self.client.create_board_membership(
                    board_id=tool_input["boardId"],
                    user_id=tool_input["userId"],
                    role=tool_input["role"],
                )
            case "get_one":
                return self.client.get_board_membership(tool_input["id"])
            case "update":
                return self.client.update_board_membership(
                    tool_input["id"],
                    role=tool_input.get("role"),
                    can_comment=tool_input.get("canComment"),
                )
            case "delete":
                return self.client.delete_board_membership(tool_input["id"])
            case _:
                raise ValueError(f"Unknown action: {action}")

    def _activity(self, action: str, tool_input: dict[str, Any]) -> Any:
        match action:
            case "get_activity":
                return get_activity_feed(
                    self.client,
                    tool_input["projectId"],
                    since=tool_input.get("since"),
                    until=tool_input.get("until"),
                    max_comments=_max_comments(tool_input),
                )
            case "resolve_users":
                user_ids = tool_input["userIds"]
                if not isinstance(user_ids, list) or not user_ids:
                    raise ValueError("userIds array is required for resolve_users action")
                return resolve_users(self.client, user_ids)
            case _:
                raise ValueError(f"Unknown action: {action}")
