"""Shared fixtures: an in-memory Planka for the aggregator tests."""

from typing import Any

import pytest

from planka_mcp.accessor import ResourceAccessor
from planka_mcp.client import PlankaAPIError


class FakeAccessor(ResourceAccessor):
    """
    Dict-backed ResourceAccessor.

    Failures are injected per (method, id) through `fail`, e.g.
    ``fake.fail("list_tasks", "card-1")``.
    """

    def __init__(self):
        self.project_boards: dict[str, list[str]] = {}
        self.boards: dict[str, dict[str, Any]] = {}
        self.lists: dict[str, list[dict[str, Any]]] = {}
        self.cards: dict[str, list[dict[str, Any]]] = {}
        self.tasks: dict[str, list[dict[str, Any]]] = {}
        self.comments: dict[str, list[dict[str, Any]]] = {}
        self.labels: dict[str, list[dict[str, Any]]] = {}
        self.users: list[dict[str, Any]] = []
        self.calls: list[tuple[str, Any]] = []
        self._failures: dict[tuple[str, Any], Exception] = {}
        self._next_id = 0

    # -- setup helpers --------------------------------------------------------

    def add_board(self, project_id: str, board_id: str, name: str = "Board") -> dict[str, Any]:
        board = {"id": board_id, "projectId": project_id, "name": name, "position": 65535}
        self.boards[board_id] = board
        self.project_boards.setdefault(project_id, []).append(board_id)
        self.lists.setdefault(board_id, [])
        self.labels.setdefault(board_id, [])
        return board

    def add_list(self, board_id: str, list_id: str, name: str) -> dict[str, Any]:
        kanban_list = {"id": list_id, "boardId": board_id, "name": name, "position": 65535}
        self.lists[board_id].append(kanban_list)
        self.cards.setdefault(list_id, [])
        return kanban_list

    def add_card(self, list_id: str, card_id: str, created_at: str, **fields: Any) -> dict[str, Any]:
        card = {"id": card_id, "listId": list_id, "name": f"Card {card_id}", "createdAt": created_at}
        card.update(fields)
        self.cards[list_id].append(card)
        return card

    def add_task(self, card_id: str, task_id: str, created_at: str, **fields: Any) -> dict[str, Any]:
        task = {"id": task_id, "cardId": card_id, "name": f"Task {task_id}", "createdAt": created_at}
        task.update(fields)
        self.tasks.setdefault(card_id, []).append(task)
        return task

    def add_comment(self, card_id: str, comment_id: str, created_at: str, **fields: Any) -> dict[str, Any]:
        comment = {"id": comment_id, "cardId": card_id, "createdAt": created_at}
        comment.update(fields)
        self.comments.setdefault(card_id, []).append(comment)
        return comment

    def add_label(self, board_id: str, label_id: str, name: str, color: str = "berry-red") -> dict[str, Any]:
        label = {"id": label_id, "boardId": board_id, "name": name, "color": color}
        self.labels[board_id].append(label)
        return label

    def fail(self, method: str, key: Any, error: Exception | None = None) -> None:
        self._failures[(method, key)] = error or PlankaAPIError(f"{method} failed", code="REQUEST_ERROR")

    def _call(self, method: str, key: Any) -> None:
        self.calls.append((method, key))
        error = self._failures.get((method, key))
        if error is not None:
            raise error

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-new-{self._next_id}"

    # -- ResourceAccessor -----------------------------------------------------

    def list_boards(self, project_id):
        self._call("list_boards", project_id)
        return [self.boards[board_id] for board_id in self.project_boards.get(project_id, [])]

    def get_board(self, board_id):
        self._call("get_board", board_id)
        return self.boards.get(board_id)

    def list_lists(self, board_id):
        self._call("list_lists", board_id)
        return list(self.lists.get(board_id, []))

    def list_cards(self, list_id, board_id=None):
        self._call("list_cards", list_id)
        return list(self.cards.get(list_id, []))

    def list_tasks(self, card_id):
        self._call("list_tasks", card_id)
        return list(self.tasks.get(card_id, []))

    def list_comments(self, card_id):
        self._call("list_comments", card_id)
        return list(self.comments.get(card_id, []))

    def list_labels(self, board_id):
        self._call("list_labels", board_id)
        return list(self.labels.get(board_id, []))

    def list_users(self):
        self._call("list_users", None)
        return list(self.users)

    def create_card(self, list_id, name, description="", position=65535, type="project"):
        self._call("create_card", list_id)
        card = {
            "id": self._new_id("card"),
            "listId": list_id,
            "name": name,
            "description": description,
            "position": position,
            "type": type,
        }
        self.cards.setdefault(list_id, []).append(card)
        return card

    def create_task(self, card_id, name, position=65535):
        self._call("create_task", name)
        task = {"id": self._new_id("task"), "cardId": card_id, "name": name, "position": position}
        self.tasks.setdefault(card_id, []).append(task)
        return task

    def create_comment(self, card_id, text):
        self._call("create_comment", card_id)
        comment = {"id": self._new_id("comment"), "cardId": card_id, "text": text}
        self.comments.setdefault(card_id, []).append(comment)
        return comment


@pytest.fixture
def fake():
    """An empty in-memory Planka."""
    return FakeAccessor()
