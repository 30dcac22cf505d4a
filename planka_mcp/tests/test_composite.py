"""Tests for creating a card with its tasks and comment."""

import pytest

from planka_mcp.client import PlankaAPIError
from planka_mcp.composite import create_card_with_tasks


@pytest.fixture
def board(fake):
    fake.add_board("P", "B")
    fake.add_list("B", "todo", "Backlog")
    return fake


class TestCreateCardWithTasks:
    """Happy path."""

    def test_creates_card_tasks_and_comment(self, board):
        result = create_card_with_tasks(
            board, "todo", "Release 1.0", description="Ship it", tasks=["Tag", "Build", "Publish"], comment="Go!"
        )

        assert result.complete
        assert result.card["name"] == "Release 1.0"
        assert result.card["description"] == "Ship it"
        assert [task["name"] for task in result.tasks] == ["Tag", "Build", "Publish"]
        assert result.comment["text"] == "Go!"
        assert result.failed_step is None

    def test_task_positions_are_spaced(self, board):
        result = create_card_with_tasks(board, "todo", "Card", tasks=["a", "b", "c"])

        assert [task["position"] for task in result.tasks] == [65535, 131070, 196605]

    def test_card_defaults(self, board):
        result = create_card_with_tasks(board, "todo", "Card")

        assert result.card["position"] == 65535
        assert result.card["type"] == "project"
        assert result.tasks == []
        assert result.comment is None
        assert not any(method == "create_comment" for method, _ in board.calls)

    def test_steps_run_in_order(self, board):
        create_card_with_tasks(board, "todo", "Card", tasks=["first", "second"], comment="done")

        assert [method for method, _ in board.calls] == ["create_card", "create_task", "create_task", "create_comment"]

    def test_to_dict(self, board):
        result = create_card_with_tasks(board, "todo", "Card", tasks=["a"], comment="note").to_dict()

        assert result["complete"] is True
        assert result["rolledBack"] is False
        assert result["failedStep"] is None
        assert result["steps"] == {
            "cardCreated": True,
            "tasksCreated": 1,
            "tasksRequested": 1,
            "commentCreated": True,
            "commentRequested": True,
        }


class TestPartialFailure:
    """Failures after the card exists are reported, not rolled back."""

    def test_card_failure_raises(self, board):
        board.fail("create_card", "todo", PlankaAPIError("List not found", status_code=404))

        with pytest.raises(PlankaAPIError) as exc_info:
            create_card_with_tasks(board, "todo", "Card", tasks=["a"])

        assert exc_info.value.message == "Failed to create card: List not found"
        assert not any(method == "create_task" for method, _ in board.calls)

    def test_task_failure_keeps_earlier_writes(self, board):
        board.fail("create_task", "b", PlankaAPIError("Request failed", code="REQUEST_ERROR"))

        result = create_card_with_tasks(board, "todo", "Card", tasks=["a", "b", "c"], comment="note")

        assert not result.complete
        assert result.failed_step == "task 2 of 3 ('b')"
        assert "Request failed" in result.error
        assert [task["name"] for task in result.tasks] == ["a"]
        assert result.comment is None
        # Nothing is undone: the card and the first task remain
        assert len(board.cards["todo"]) == 1
        assert [task["name"] for task in board.tasks[result.card["id"]]] == ["a"]
        assert not any(method == "create_comment" for method, _ in board.calls)

    def test_task_failure_to_dict(self, board):
        board.fail("create_task", "a")

        result = create_card_with_tasks(board, "todo", "Card", tasks=["a", "b"]).to_dict()

        assert result["complete"] is False
        assert result["rolledBack"] is False
        assert result["steps"]["tasksCreated"] == 0
        assert result["steps"]["tasksRequested"] == 2
        assert result["failedStep"] == "task 1 of 2 ('a')"

    def test_comment_failure(self, board):
        card_key = "card-new-1"
        board.fail("create_comment", card_key)

        result = create_card_with_tasks(board, "todo", "Card", tasks=["a"], comment="note")

        assert result.card["id"] == card_key
        assert not result.complete
        assert result.failed_step == "comment"
        assert [task["name"] for task in result.tasks] == ["a"]
