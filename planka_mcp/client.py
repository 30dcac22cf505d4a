"""
Planka API Client implementation.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .accessor import ResourceAccessor
from .models import (
    Board,
    BoardMembership,
    Card,
    CardLabel,
    Comment,
    KanbanList,
    Label,
    Project,
    Task,
    User,
)
from .task_index import TaskCardIndex
from .utils import format_duration, format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

# Planka positions are spaced by this unit so items can be reordered by midpoint
POSITION_GAP = 65535


class PlankaAPIError(Exception):
    """Exception raised for Planka API errors."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def wrap(cls, operation: str, error: Exception) -> "PlankaAPIError":
        """Prefix an error with the operation that failed, keeping its code and status."""
        if isinstance(error, cls):
            return cls(f"Failed to {operation}: {error.message}", code=error.code, status_code=error.status_code)
        return cls(f"Failed to {operation}: {error}")

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"(code: {self.code})")
        if self.status_code:
            parts.append(f"[HTTP {self.status_code}]")
        return " ".join(parts)


def _is_retryable(exception: BaseException) -> bool:
    """Check if exception is retryable (network errors, 5xx server errors)."""
    if isinstance(exception, httpx.RequestError):
        return True
    if isinstance(exception, PlankaAPIError):
        if exception.code == "REQUEST_ERROR":
            return True
        if exception.status_code and exception.status_code >= 500:
            return True
    return False


def _log_retry(retry_state) -> None:
    """Log retry attempts."""
    logger.warning(
        f"Retrying request (attempt {retry_state.attempt_number}) after error: {retry_state.outcome.exception()}"
    )


def _validated(model: type[BaseModel], data: Any, operation: str) -> dict[str, Any]:
    """Check one entity against its model and hand back the raw dict."""
    try:
        model.model_validate(data)
    except ValidationError as e:
        raise PlankaAPIError(
            f"Invalid response from {operation}: {e}",
            code="INVALID_RESPONSE",
        ) from e
    return data


def _validated_list(model: type[BaseModel], data: Any, operation: str) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        raise PlankaAPIError(
            f"Invalid response from {operation}: expected a list, got {type(data).__name__}",
            code="INVALID_RESPONSE",
        )
    return [_validated(model, entry, operation) for entry in data]


def _item(response: dict[str, Any], model: type[BaseModel], operation: str) -> dict[str, Any]:
    """Unwrap a ``{"item": ...}`` envelope."""
    if not isinstance(response, dict) or "item" not in response:
        raise PlankaAPIError(f"Invalid response from {operation}: missing 'item'", code="INVALID_RESPONSE")
    return _validated(model, response["item"], operation)


def _items(response: dict[str, Any], model: type[BaseModel], operation: str) -> list[dict[str, Any]]:
    """Unwrap an ``{"items": [...]}`` envelope."""
    if not isinstance(response, dict) or "items" not in response:
        raise PlankaAPIError(f"Invalid response from {operation}: missing 'items'", code="INVALID_RESPONSE")
    return _validated_list(model, response["items"], operation)


def _included(response: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Read a side-loaded collection; Planka omits empty ones."""
    included = response.get("included") if isinstance(response, dict) else None
    if not isinstance(included, dict):
        return []
    value = included.get(key)
    return value if isinstance(value, list) else []


class PlankaClient(ResourceAccessor):
    """
    Python client for the Planka REST API.

    Example:
        >>> client = PlankaClient(
        ...     base_url="http://localhost:3000",
        ...     token="eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."
        ... )
        >>> projects = client.list_projects()
        >>> print(projects["items"])
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        task_index: TaskCardIndex | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the Planka API client.

        Args:
            base_url: The base URL of the Planka server (e.g., "http://localhost:3000")
            token: An access token for the Planka API
            timeout: Request timeout in seconds (default: 30.0)
            task_index: Task-to-card index to use (default: a fresh bounded index)
            transport: httpx transport override (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.task_index = task_index if task_index is not None else TaskCardIndex()
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "PlankaClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception(_is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make an API request with automatic retry for transient failures.

        Retries on network errors and 5xx server errors with exponential backoff.
        Does NOT retry on 4xx client errors (auth failures, validation errors).

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: API path (e.g., "/api/boards/abc")
            json: JSON body for POST/PATCH requests

        Returns:
            The decoded response body (Planka's ``item``/``items``/``included`` envelope)

        Raises:
            PlankaAPIError: If the API returns an error (after retries exhausted)
        """
        try:
            response = self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            raise PlankaAPIError(f"Request failed: {e}", code="REQUEST_ERROR") from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError as e:
                raise PlankaAPIError(
                    message=response.text or "Unknown error",
                    status_code=response.status_code,
                ) from e
            message = "Unknown error"
            code = None
            if isinstance(error_data, dict):
                message = error_data.get("message") or error_data.get("problems") or message
                code = error_data.get("code")
            raise PlankaAPIError(message=str(message), code=code, status_code=response.status_code)

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise PlankaAPIError(
                message="Invalid JSON response",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
            ) from e

    # =========================================================================
    # Project Methods
    # =========================================================================

    def list_projects(self, page: int = 1, per_page: int = 50) -> dict[str, Any]:
        """
        List the projects visible to the token owner, one page at a time.

        Planka returns every project in one response; the page is cut here.

        Args:
            page: 1-based page number
            per_page: Number of projects per page

        Returns:
            Dict with 'items' (projects on this page), 'page', 'perPage' and 'total'
        """
        if page < 1 or per_page < 1:
            raise ValueError("page and perPage must be positive")
        response = self._request("GET", "/api/projects")
        projects = _items(response, Project, "list_projects")
        start = (page - 1) * per_page
        return {
            "items": projects[start : start + per_page],
            "page": page,
            "perPage": per_page,
            "total": len(projects),
        }

    def get_project(self, project_id: str) -> dict[str, Any]:
        """
        Get a project with its boards.

        Args:
            project_id: The id of the project

        Returns:
            Project object with a 'boards' list
        """
        response = self._request("GET", f"/api/projects/{project_id}")
        project = dict(_item(response, Project, "get_project"))
        project["boards"] = _validated_list(Board, _included(response, "boards"), "get_project")
        return project

    # =========================================================================
    # Board Methods
    # =========================================================================

    def list_boards(self, project_id: str) -> list[dict[str, Any]]:
        """
        List the boards of a project.

        Args:
            project_id: The id of the project

        Returns:
            A list of board objects with id, projectId, name, position
        """
        response = self._request("GET", f"/api/projects/{project_id}")
        return _validated_list(Board, _included(response, "boards"), "list_boards")

    def _get_board_response(self, board_id: str) -> dict[str, Any]:
        """Fetch a board with everything Planka side-loads (lists, cards, labels, memberships)."""
        return self._request("GET", f"/api/boards/{board_id}")

    def get_board(self, board_id: str) -> dict[str, Any] | None:
        """
        Get a board.

        Args:
            board_id: The id of the board

        Returns:
            Board object, or None when the board does not exist
        """
        try:
            response = self._get_board_response(board_id)
        except PlankaAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return _item(response, Board, "get_board")

    def create_board(self, project_id: str, name: str, position: int) -> dict[str, Any]:
        """
        Create a board in a project.

        Args:
            project_id: The id of the project
            name: Board name
            position: Board position within the project

        Returns:
            Created board object
        """
        response = self._request(
            "POST",
            f"/api/projects/{project_id}/boards",
            json={"name": name, "position": position},
        )
        return _item(response, Board, "create_board")

    def update_board(self, board_id: str, name: str, position: int, type: str | None = None) -> dict[str, Any]:
        """
        Rename or reposition a board.

        Args:
            board_id: The id of the board
            name: New board name
            position: New position
            type: Board type (optional)

        Returns:
            Updated board object
        """
        data: dict[str, Any] = {"name": name, "position": position}
        if type:
            data["type"] = type
        response = self._request("PATCH", f"/api/boards/{board_id}", json=data)
        return _item(response, Board, "update_board")

    def delete_board(self, board_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/boards/{board_id}")
        return {"success": True}

    # =========================================================================
    # List Methods
    # =========================================================================

    def list_lists(self, board_id: str) -> list[dict[str, Any]]:
        """
        List the lists (columns) of a board.

        Args:
            board_id: The id of the board

        Returns:
            A list of list objects with id, boardId, name, position
        """
        response = self._get_board_response(board_id)
        return _validated_list(KanbanList, _included(response, "lists"), "list_lists")

    def get_list(self, list_id: str) -> dict[str, Any]:
        response = self._request("GET", f"/api/lists/{list_id}")
        return _item(response, KanbanList, "get_list")

    def create_list(self, board_id: str, name: str, position: int) -> dict[str, Any]:
        """
        Create a list on a board.

        Args:
            board_id: The id of the board
            name: List name
            position: List position on the board

        Returns:
            Created list object
        """
        response = self._request(
            "POST",
            f"/api/boards/{board_id}/lists",
            json={"name": name, "position": position, "type": "active"},
        )
        return _item(response, KanbanList, "create_list")

    def update_list(self, list_id: str, name: str, position: int) -> dict[str, Any]:
        response = self._request("PATCH", f"/api/lists/{list_id}", json={"name": name, "position": position})
        return _item(response, KanbanList, "update_list")

    def delete_list(self, list_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/lists/{list_id}")
        return {"success": True}

    # =========================================================================
    # Card Methods
    # =========================================================================

    def list_cards(self, list_id: str, board_id: str | None = None) -> list[dict[str, Any]]:
        """
        List the cards in a list.

        Cards are read from the owning board's side-loaded collections. Each
        card gets a 'labelIds' list built from the board's card-label joins.

        Args:
            list_id: The id of the list
            board_id: The id of the owning board (looked up from the list when omitted)

        Returns:
            A list of card objects
        """
        if board_id is None:
            board_id = self.get_list(list_id)["boardId"]

        response = self._get_board_response(board_id)
        cards = _validated_list(Card, _included(response, "cards"), "list_cards")
        card_labels = _validated_list(CardLabel, _included(response, "cardLabels"), "list_cards")

        label_ids: dict[str, list[str]] = {}
        for card_label in card_labels:
            label_ids.setdefault(card_label["cardId"], []).append(card_label["labelId"])

        return [
            {**card, "labelIds": label_ids.get(card["id"], [])} for card in cards if card["listId"] == list_id
        ]

    def get_card(self, card_id: str) -> dict[str, Any]:
        """
        Get a card.

        Args:
            card_id: The id of the card

        Returns:
            Card object with name, description, dueDate, stopwatch, etc.
        """
        response = self._request("GET", f"/api/cards/{card_id}")
        return _item(response, Card, "get_card")

    def create_card(
        self,
        list_id: str,
        name: str,
        description: str = "",
        position: int = POSITION_GAP,
        type: str = "project",
    ) -> dict[str, Any]:
        """
        Create a card in a list.

        Args:
            list_id: The id of the list
            name: Card name
            description: Card description (optional)
            position: Position in the list (default: 65535)
            type: Card type, 'project' or 'story' (default: 'project')

        Returns:
            Created card object

        Example:
            >>> card = client.create_card(list_id="xyz789...", name="New Card")
        """
        data: dict[str, Any] = {"name": name, "position": position, "type": type or "project"}
        if description:
            data["description"] = description

        response = self._request("POST", f"/api/lists/{list_id}/cards", json=data)
        return _item(response, Card, "create_card")

    def update_card(self, card_id: str, **fields: Any) -> dict[str, Any]:
        """
        Update card fields.

        Args:
            card_id: The id of the card
            **fields: Any of name, description, position, dueDate, isCompleted, stopwatch

        Returns:
            Updated card object

        Example:
            >>> card = client.update_card("def456...", name="Updated", isCompleted=True)
        """
        response = self._request("PATCH", f"/api/cards/{card_id}", json=fields)
        return _item(response, Card, "update_card")

    def move_card(
        self,
        card_id: str,
        list_id: str,
        position: int = POSITION_GAP,
        board_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Move a card to another list, optionally on another board or project.

        Args:
            card_id: The id of the card to move
            list_id: The id of the target list
            position: Position in the target list (default: 65535)
            board_id: Target board when moving across boards (optional)
            project_id: Target project when moving across projects (optional)

        Returns:
            Updated card object
        """
        data: dict[str, Any] = {"listId": list_id, "position": position}
        if board_id:
            data["boardId"] = board_id
        if project_id:
            data["projectId"] = project_id
        response = self._request("PATCH", f"/api/cards/{card_id}", json=data)
        return _item(response, Card, "move_card")

    def duplicate_card(self, card_id: str, position: int | None = None) -> dict[str, Any]:
        """
        Copy a card's name and description into a new card in the same list.

        Args:
            card_id: The id of the card to copy
            position: Position of the copy (default: 65535)

        Returns:
            The new card, named "Copy of <original name>"
        """
        original = self.get_card(card_id)
        return self.create_card(
            list_id=original["listId"],
            name=f"Copy of {original['name']}",
            description=original.get("description") or "",
            position=position or POSITION_GAP,
        )

    def delete_card(self, card_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/cards/{card_id}")
        return {"success": True}

    # =========================================================================
    # Stopwatch Methods
    # =========================================================================

    def start_stopwatch(self, card_id: str) -> dict[str, Any]:
        """
        Start a card's stopwatch, keeping any previously accumulated total.

        Args:
            card_id: The id of the card

        Returns:
            Updated card object
        """
        card = self.get_card(card_id)
        total = (card.get("stopwatch") or {}).get("total") or 0
        stopwatch = {"startedAt": format_timestamp(utc_now()), "total": total}
        return self.update_card(card_id, stopwatch=stopwatch)

    def stop_stopwatch(self, card_id: str) -> dict[str, Any]:
        """
        Stop a running stopwatch and add the elapsed whole seconds to its total.

        A stopwatch that is not running is left alone and the card returned as is.
        """
        card = self.get_card(card_id)
        stopwatch = card.get("stopwatch") or {}
        started_at = parse_timestamp(stopwatch.get("startedAt"))
        if started_at is None:
            return card

        elapsed = int((utc_now() - started_at).total_seconds())
        total = int(stopwatch.get("total") or 0) + elapsed
        return self.update_card(card_id, stopwatch={"startedAt": None, "total": total})

    def get_stopwatch(self, card_id: str) -> dict[str, Any]:
        """
        Report a card's stopwatch state.

        Returns:
            Dict with isRunning, total, current (seconds since start), startedAt,
            formattedTotal and formattedCurrent
        """
        card = self.get_card(card_id)
        stopwatch = card.get("stopwatch")
        if not stopwatch:
            return {
                "isRunning": False,
                "total": 0,
                "current": 0,
                "formattedTotal": format_duration(0),
                "formattedCurrent": format_duration(0),
            }

        started_at = parse_timestamp(stopwatch.get("startedAt"))
        current = int((utc_now() - started_at).total_seconds()) if started_at else 0
        total = int(stopwatch.get("total") or 0)
        return {
            "isRunning": started_at is not None,
            "total": total,
            "current": current,
            "startedAt": stopwatch.get("startedAt"),
            "formattedTotal": format_duration(total),
            "formattedCurrent": format_duration(current),
        }

    def reset_stopwatch(self, card_id: str) -> dict[str, Any]:
        return self.update_card(card_id, stopwatch=None)

    # =========================================================================
    # Task Methods
    # =========================================================================

    def list_tasks(self, card_id: str) -> list[dict[str, Any]]:
        """
        List the tasks of a card.

        Args:
            card_id: The id of the card

        Returns:
            A list of task objects with id, name, isCompleted, position
        """
        response = self._request("GET", f"/api/cards/{card_id}")
        tasks = _validated_list(Task, _included(response, "tasks"), "list_tasks")
        for task in tasks:
            self.task_index.remember(task["id"], card_id)
        return tasks

    def get_task(self, task_id: str, card_id: str | None = None) -> dict[str, Any]:
        """
        Get one task.

        Planka has no task-by-id endpoint, so the task is found among its
        card's tasks. Without card_id the task index is consulted, which only
        knows tasks this client has already seen.

        Raises:
            PlankaAPIError: TASK_CARD_UNKNOWN when the owning card cannot be
                determined, NOT_FOUND when the card has no such task
        """
        owning_card = card_id or self.task_index.lookup(task_id)
        if not owning_card:
            raise PlankaAPIError(
                "Card ID is required to get a task. Either provide it directly or create the task first.",
                code="TASK_CARD_UNKNOWN",
            )

        for task in self.list_tasks(owning_card):
            if task["id"] == task_id:
                return task

        self.task_index.invalidate(task_id)
        raise PlankaAPIError(f"Task with ID {task_id} not found in card {owning_card}", code="NOT_FOUND")

    def _get_or_create_task_list(self, card_id: str) -> str:
        """Return the id of the card's first task list, creating one named "Tasks" if needed."""
        response = self._request("GET", f"/api/cards/{card_id}")
        task_lists = _included(response, "taskLists")
        if task_lists:
            return task_lists[0]["id"]

        created = self._request(
            "POST",
            f"/api/cards/{card_id}/task-lists",
            json={"name": "Tasks", "position": POSITION_GAP, "showOnFrontOfCard": True},
        )
        item = created.get("item") if isinstance(created, dict) else None
        if not isinstance(item, dict) or not item.get("id"):
            raise PlankaAPIError("Failed to create task list", code="INVALID_RESPONSE")
        return item["id"]

    def create_task(self, card_id: str, name: str, position: int = POSITION_GAP) -> dict[str, Any]:
        """
        Create a task on a card.

        Args:
            card_id: The id of the card
            name: Task name
            position: Position in the task list (default: 65535)

        Returns:
            Created task object
        """
        task_list_id = self._get_or_create_task_list(card_id)
        response = self._request(
            "POST",
            f"/api/task-lists/{task_list_id}/tasks",
            json={"name": name, "position": position},
        )
        task = _item(response, Task, "create_task")
        self.task_index.remember(task["id"], card_id)
        return task

    def batch_create_tasks(self, tasks: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Create several tasks one after the other.

        A failing task does not stop the batch. Tasks without a position get
        65535 * (index + 1).

        Args:
            tasks: Dicts with cardId, name and optional position

        Returns:
            Dict with 'results' (per task, in order), 'successes' and 'failures'
        """
        results: list[dict[str, Any]] = []
        successes: list[dict[str, Any]] = []
        failures: list[dict[str, Any]] = []

        for index, spec in enumerate(tasks):
            position = spec.get("position") or POSITION_GAP * (index + 1)
            try:
                task = self.create_task(spec["cardId"], spec["name"], position=position)
            except PlankaAPIError as e:
                results.append({"success": False, "error": {"message": str(e)}})
                failures.append({"index": index, "task": spec, "error": str(e)})
                continue
            results.append({"success": True, "result": task})
            successes.append(task)

        return {"results": results, "successes": successes, "failures": failures}

    def update_task(self, task_id: str, **fields: Any) -> dict[str, Any]:
        """
        Update task fields.

        Args:
            task_id: The id of the task
            **fields: Any of name, position, isCompleted

        Returns:
            Updated task object
        """
        response = self._request("PATCH", f"/api/tasks/{task_id}", json=fields)
        return _item(response, Task, "update_task")

    def complete_task(self, task_id: str) -> dict[str, Any]:
        return self.update_task(task_id, isCompleted=True)

    def delete_task(self, task_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/tasks/{task_id}")
        self.task_index.invalidate(task_id)
        return {"success": True}

    # =========================================================================
    # Comment Methods
    # =========================================================================

    def list_comments(self, card_id: str) -> list[dict[str, Any]]:
        """
        List the comments on a card.

        Args:
            card_id: The id of the card

        Returns:
            A list of comment objects with id, userId, text, createdAt
        """
        response = self._request("GET", f"/api/cards/{card_id}/comments")
        return _items(response, Comment, "list_comments")

    def create_comment(self, card_id: str, text: str) -> dict[str, Any]:
        """
        Add a comment to a card.

        Args:
            card_id: The id of the card
            text: Comment text (markdown)

        Returns:
            Created comment object
        """
        response = self._request("POST", f"/api/cards/{card_id}/comments", json={"text": text})
        return _item(response, Comment, "create_comment")

    def update_comment(self, comment_id: str, text: str) -> dict[str, Any]:
        response = self._request("PATCH", f"/api/comments/{comment_id}", json={"text": text})
        return _item(response, Comment, "update_comment")

    def delete_comment(self, comment_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/comments/{comment_id}")
        return {"success": True}

    def scan_for_comment(self, comment_id: str) -> dict[str, Any]:
        """
        Find a comment by id by scanning every card the token can see.

        Planka has no comment-by-id lookup. This walks all projects, all their
        boards and the comments of every card until the id turns up, so it
        costs one request per board plus one per card. Prefer list_comments
        when the card is known.

        Raises:
            PlankaAPIError: COMMENT_NOT_FOUND when no card carries the comment
        """
        projects_response = self._request("GET", "/api/projects")
        boards = _included(projects_response, "boards")
        logger.info(f"Scanning {len(boards)} board(s) for comment {comment_id}")

        cards_scanned = 0
        for board in boards:
            board_response = self._get_board_response(board["id"])
            for card in _included(board_response, "cards"):
                cards_scanned += 1
                for comment in self.list_comments(card["id"]):
                    if comment["id"] == comment_id:
                        logger.info(f"Found comment {comment_id} after scanning {cards_scanned} card(s)")
                        return comment

        raise PlankaAPIError(f"Comment not found: {comment_id}", code="COMMENT_NOT_FOUND")

    # =========================================================================
    # Label Methods
    # =========================================================================

    def list_labels(self, board_id: str) -> list[dict[str, Any]]:
        """
        List the labels defined on a board.

        Args:
            board_id: The id of the board

        Returns:
            A list of label objects with id, name, color, position
        """
        response = self._get_board_response(board_id)
        return _validated_list(Label, _included(response, "labels"), "list_labels")

    def create_label(self, board_id: str, name: str, color: str, position: int = POSITION_GAP) -> dict[str, Any]:
        """
        Create a label on a board.

        Args:
            board_id: The id of the board
            name: Label name
            color: One of the Planka palette colors (see models.LABEL_COLORS)
            position: Label position (default: 65535)

        Returns:
            Created label object
        """
        response = self._request(
            "POST",
            f"/api/boards/{board_id}/labels",
            json={"name": name, "color": color, "position": position},
        )
        return _item(response, Label, "create_label")

    def update_label(self, label_id: str, **fields: Any) -> dict[str, Any]:
        response = self._request("PATCH", f"/api/labels/{label_id}", json=fields)
        return _item(response, Label, "update_label")

    def delete_label(self, label_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/labels/{label_id}")
        return {"success": True}

    def add_label_to_card(self, card_id: str, label_id: str) -> dict[str, Any]:
        """
        Attach a board label to a card.

        Returns:
            Dict with 'success' and the created 'cardLabel' join
        """
        response = self._request("POST", f"/api/cards/{card_id}/card-labels", json={"labelId": label_id})
        return {"success": True, "cardLabel": response.get("item") if isinstance(response, dict) else None}

    def remove_label_from_card(self, card_id: str, label_id: str) -> dict[str, Any]:
        """
        Detach a label from a card.

        Removing a label the card does not carry is a success and sends no
        DELETE request.

        Returns:
            Dict with 'success' (and a 'message' when nothing had to be removed)
        """
        response = self._request("GET", f"/api/cards/{card_id}")
        card_label = next(
            (
                cl
                for cl in _included(response, "cardLabels")
                if cl.get("cardId") == card_id and cl.get("labelId") == label_id
            ),
            None,
        )
        if card_label is None:
            return {"success": True, "message": "Label was not on card"}

        try:
            self._request("DELETE", f"/api/card-labels/{card_label['id']}")
        except PlankaAPIError as e:
            raise PlankaAPIError(
                "Cannot remove label - the DELETE /api/card-labels endpoint returned an error. "
                f"Some Planka versions do not support it; remove the label in the Planka UI. ({e.message})",
                code=e.code,
                status_code=e.status_code,
            ) from e
        return {"success": True}

    # =========================================================================
    # Board Membership Methods
    # =========================================================================

    def list_board_memberships(self, board_id: str) -> list[dict[str, Any]]:
        response = self._get_board_response(board_id)
        return _validated_list(BoardMembership, _included(response, "boardMemberships"), "list_board_memberships")

    def get_board_membership(self, membership_id: str) -> dict[str, Any]:
        response = self._request("GET", f"/api/board-memberships/{membership_id}")
        return _item(response, BoardMembership, "get_board_membership")

    def create_board_membership(self, board_id: str, user_id: str, role: str) -> dict[str, Any]:
        """
        Add a user to a board.

        Args:
            board_id: The id of the board
            user_id: The id of the user
            role: 'editor' or 'viewer'

        Returns:
            Created membership object
        """
        response = self._request(
            "POST",
            f"/api/boards/{board_id}/board-memberships",
            json={"userId": user_id, "role": role},
        )
        return _item(response, BoardMembership, "create_board_membership")

    def update_board_membership(
        self,
        membership_id: str,
        role: str | None = None,
        can_comment: bool | None = None,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if role is not None:
            data["role"] = role
        if can_comment is not None:
            data["canComment"] = can_comment
        response = self._request("PATCH", f"/api/board-memberships/{membership_id}", json=data)
        return _item(response, BoardMembership, "update_board_membership")

    def delete_board_membership(self, membership_id: str) -> dict[str, Any]:
        self._request("DELETE", f"/api/board-memberships/{membership_id}")
        return {"success": True}

    # =========================================================================
    # User Methods
    # =========================================================================

    def list_users(self) -> list[dict[str, Any]]:
        """
        List all users.

        Returns:
            A list of user objects with id, name, username, email
        """
        response = self._request("GET", "/api/users")
        return _items(response, User, "list_users")
