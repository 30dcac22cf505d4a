"""Tests for the board summary aggregator."""

import pytest

from planka_mcp.board_summary import get_board_summary, next_action_suggestion
from planka_mcp.client import PlankaAPIError

CREATED = "2025-06-01T10:00:00.000Z"


@pytest.fixture
def board(fake):
    """Board B with Backlog (2 cards) and Done (1 card)."""
    fake.add_board("P", "B", "Main")
    fake.add_list("B", "backlog", "Backlog")
    fake.add_list("B", "done", "Done")
    fake.add_card("backlog", "c1", CREATED)
    fake.add_card("backlog", "c2", CREATED)
    fake.add_card("done", "c3", CREATED, isCompleted=True)
    return fake


class TestBoardSummaryScenario:
    """The default summary of a small board."""

    def test_stats(self, board):
        summary = get_board_summary(board, "B")

        assert summary["stats"] == {
            "totalCards": 3,
            "backlogCount": 2,
            "inProgressCount": 0,
            "testingCount": 0,
            "doneCount": 1,
            "urgentCount": 0,
            "bugCount": 0,
            "completionPercentage": 33,
        }

    def test_workflow_state(self, board):
        summary = get_board_summary(board, "B")

        assert summary["workflowState"] == {
            "hasCardsInBacklog": True,
            "hasCardsInProgress": False,
            "hasCardsInTesting": False,
            "nextActionSuggestion": "Start working on a card from Backlog",
        }

    def test_lists_carry_cards_in_order(self, board):
        summary = get_board_summary(board, "B")

        assert summary["board"]["id"] == "B"
        assert [lst["id"] for lst in summary["lists"]] == ["backlog", "done"]
        assert [card["id"] for card in summary["lists"][0]["cards"]] == ["c1", "c2"]
        assert [lst["cardCount"] for lst in summary["lists"]] == [2, 1]

    def test_no_details_fetched_by_default(self, board):
        summary = get_board_summary(board, "B")

        assert not any(method in ("list_tasks", "list_comments") for method, _ in board.calls)
        assert all("tasks" not in card for lst in summary["lists"] for card in lst["cards"])


class TestStatistics:
    """Counting rules."""

    def test_empty_board_has_zero_completion(self, fake):
        fake.add_board("P", "B")

        summary = get_board_summary(fake, "B")

        assert summary["stats"]["totalCards"] == 0
        assert summary["stats"]["completionPercentage"] == 0
        assert summary["workflowState"]["nextActionSuggestion"] == "All tasks complete! Create new cards or projects"

    def test_completion_rounds_half_up(self, fake):
        fake.add_board("P", "B")
        fake.add_list("B", "done", "Done")
        fake.add_list("B", "other", "Other")
        fake.add_card("done", "d1", CREATED)
        for i in range(7):
            fake.add_card("other", f"o{i}", CREATED)

        # 1 / 8 = 12.5%
        assert get_board_summary(fake, "B")["stats"]["completionPercentage"] == 13

    def test_list_names_match_case_insensitively(self, fake):
        fake.add_board("P", "B")
        fake.add_list("B", "wip", "IN PROGRESS")
        fake.add_list("B", "qa", "testing")
        fake.add_card("wip", "c1", CREATED)
        fake.add_card("qa", "c2", CREATED)

        summary = get_board_summary(fake, "B")

        assert summary["stats"]["inProgressCount"] == 1
        assert summary["stats"]["testingCount"] == 1
        assert summary["workflowState"]["nextActionSuggestion"] == "Review cards in Testing that need feedback"

    def test_unrecognised_list_names_fall_back(self, fake):
        """Boards with their own column names always get the generic suggestion."""
        fake.add_board("P", "B")
        fake.add_list("B", "todo", "To do")
        fake.add_card("todo", "c1", CREATED)

        summary = get_board_summary(fake, "B")

        assert summary["stats"]["backlogCount"] == 0
        assert summary["workflowState"]["nextActionSuggestion"] == "All tasks complete! Create new cards or projects"

    def test_urgent_and_bug_labels_counted(self, board):
        board.add_label("B", "l-urgent", "Urgent")
        board.add_label("B", "l-bug", "bug")
        board.add_label("B", "l-other", "Docs")
        board.cards["backlog"][0]["labelIds"] = ["l-urgent", "l-bug"]
        board.cards["backlog"][1]["labelIds"] = ["l-bug"]
        board.cards["done"][0]["labelIds"] = ["l-other"]

        stats = get_board_summary(board, "B")["stats"]

        assert stats["urgentCount"] == 1
        assert stats["bugCount"] == 2

    def test_labels_returned(self, board):
        board.add_label("B", "l1", "Urgent", "berry-red")

        summary = get_board_summary(board, "B")

        assert summary["labels"] == [{"id": "l1", "boardId": "B", "name": "Urgent", "color": "berry-red"}]


class TestNextActionSuggestion:
    """Priority order of the suggestion."""

    @pytest.mark.parametrize(
        "backlog,in_progress,testing,expected",
        [
            (1, 1, 1, "Review cards in Testing that need feedback"),
            (1, 1, 0, "Continue working on cards in In Progress"),
            (1, 0, 0, "Start working on a card from Backlog"),
            (0, 0, 0, "All tasks complete! Create new cards or projects"),
        ],
    )
    def test_priority(self, backlog, in_progress, testing, expected):
        assert next_action_suggestion(backlog, in_progress, testing) == expected


class TestCardDetails:
    """Optional task and comment details."""

    def test_task_details(self, board):
        board.add_task("c1", "t1", CREATED, isCompleted=True)
        board.add_task("c1", "t2", CREATED, isCompleted=False)
        board.add_task("c1", "t3", CREATED, isCompleted=True)

        summary = get_board_summary(board, "B", include_task_details=True)

        c1 = summary["lists"][0]["cards"][0]
        assert c1["id"] == "c1"
        assert c1["tasks"]["total"] == 3
        assert c1["tasks"]["completed"] == 2
        assert c1["tasks"]["completionPercentage"] == 67
        assert [task["id"] for task in c1["tasks"]["items"]] == ["t1", "t2", "t3"]
        assert summary["lists"][1]["cards"][0]["tasks"]["completionPercentage"] == 0
        assert "comments" not in c1

    def test_comments(self, board):
        board.add_comment("c3", "m1", CREATED, text="shipped")

        summary = get_board_summary(board, "B", include_comments=True)

        done_card = summary["lists"][1]["cards"][0]
        assert done_card["comments"] == [{"id": "m1", "cardId": "c3", "createdAt": CREATED, "text": "shipped"}]
        assert "tasks" not in done_card

    def test_details_keep_list_grouping(self, board):
        summary = get_board_summary(board, "B", include_task_details=True, include_comments=True, max_workers=2)

        assert [[card["id"] for card in lst["cards"]] for lst in summary["lists"]] == [["c1", "c2"], ["c3"]]


class TestFailures:
    """The summary is all-or-nothing."""

    def test_missing_board(self, fake):
        with pytest.raises(PlankaAPIError) as exc_info:
            get_board_summary(fake, "nope")

        assert exc_info.value.message == "Failed to get board summary: Board with ID nope not found"
        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.status_code == 404

    def test_card_fetch_failure_propagates(self, board):
        board.fail("list_cards", "done", PlankaAPIError("Request failed: timeout", code="REQUEST_ERROR"))

        with pytest.raises(PlankaAPIError, match="Failed to get board summary: Request failed: timeout"):
            get_board_summary(board, "B")

    def test_task_fetch_failure_propagates(self, board):
        board.fail("list_tasks", "c2")

        with pytest.raises(PlankaAPIError, match="Failed to get board summary: list_tasks failed"):
            get_board_summary(board, "B", include_task_details=True)

    def test_task_failure_ignored_without_details(self, board):
        board.fail("list_tasks", "c2")

        assert get_board_summary(board, "B")["stats"]["totalCards"] == 3
