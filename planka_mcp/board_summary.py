"""
Board summary: one denormalized snapshot of a board with statistics and a
suggested next step.

Unlike the activity feed this is all-or-nothing. Any failed fetch fails the
summary.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .accessor import ResourceAccessor
from .client import PlankaAPIError

logger = logging.getLogger(__name__)

# Workflow columns recognised by name (case-insensitive)
BACKLOG = "backlog"
IN_PROGRESS = "in progress"
TESTING = "testing"
DONE = "done"

URGENT_LABEL = "urgent"
BUG_LABEL = "bug"

DEFAULT_MAX_WORKERS = 8


def _percentage(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    # Math.round semantics: halves round up
    return int(part * 100 / whole + 0.5)


def next_action_suggestion(backlog_count: int, in_progress_count: int, testing_count: int) -> str:
    """
    Suggest what to do next from the Backlog / In Progress / Testing counts.

    First match wins: Testing, then In Progress, then Backlog. Boards that do
    not use these column names always get the final fallback.
    """
    if testing_count > 0:
        return "Review cards in Testing that need feedback"
    if in_progress_count > 0:
        return "Continue working on cards in In Progress"
    if backlog_count > 0:
        return "Start working on a card from Backlog"
    return "All tasks complete! Create new cards or projects"


def _card_details(
    accessor: ResourceAccessor,
    card: dict[str, Any],
    include_task_details: bool,
    include_comments: bool,
) -> dict[str, Any]:
    detailed = dict(card)

    if include_task_details:
        tasks = accessor.list_tasks(card["id"])
        completed = sum(1 for task in tasks if task.get("isCompleted"))
        detailed["tasks"] = {
            "items": tasks,
            "total": len(tasks),
            "completed": completed,
            "completionPercentage": _percentage(completed, len(tasks)),
        }

    if include_comments:
        detailed["comments"] = accessor.list_comments(card["id"])

    return detailed


def _count_in(lists: list[dict[str, Any]], name: str) -> int:
    """Card count of the first list with this name, 0 when the board has no such list."""
    for kanban_list in lists:
        list_name = kanban_list.get("name")
        if list_name and list_name.lower() == name:
            return kanban_list["cardCount"]
    return 0


def _count_labelled(cards: list[dict[str, Any]], labels: list[dict[str, Any]], label_name: str) -> int:
    label_ids = {label["id"] for label in labels if (label.get("name") or "").lower() == label_name}
    if not label_ids:
        return 0
    return sum(1 for card in cards if label_ids.intersection(card.get("labelIds") or []))


def get_board_summary(
    accessor: ResourceAccessor,
    board_id: str,
    include_task_details: bool = False,
    include_comments: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[str, Any]:
    """
    Summarize a board: lists with their cards, labels, statistics and workflow state.

    The cards of all lists are fetched in parallel, then the tasks/comments of
    all cards in parallel. A card's details are never requested before its
    list has been read.

    Args:
        accessor: Source of boards, lists, cards, tasks, comments and labels
        board_id: The id of the board
        include_task_details: Attach each card's tasks with a completion percentage
        include_comments: Attach each card's comments
        max_workers: Thread pool size for the parallel fetches

    Returns:
        Dict with 'board', 'lists' (each with 'cards' and 'cardCount'),
        'labels', 'stats' and 'workflowState'

    Raises:
        PlankaAPIError: "Failed to get board summary: ..." with code NOT_FOUND
            when the board does not exist, or the failure of any nested fetch
    """
    try:
        board = accessor.get_board(board_id)
        if board is None:
            raise PlankaAPIError(f"Board with ID {board_id} not found", code="NOT_FOUND", status_code=404)

        lists = accessor.list_lists(board_id)

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            cards_per_list = list(
                pool.map(lambda kanban_list: accessor.list_cards(kanban_list["id"], board_id=board_id), lists)
            )

            if include_task_details or include_comments:
                flat_cards = [card for cards in cards_per_list for card in cards]
                detailed = iter(
                    list(
                        pool.map(
                            lambda card: _card_details(accessor, card, include_task_details, include_comments),
                            flat_cards,
                        )
                    )
                )
                cards_per_list = [[next(detailed) for _ in cards] for cards in cards_per_list]

        labels = accessor.list_labels(board_id)
    except Exception as e:
        logger.error(f"Error in get_board_summary for board {board_id}: {e}")
        raise PlankaAPIError.wrap("get board summary", e) from e

    lists_with_cards = [
        {**kanban_list, "cards": cards, "cardCount": len(cards)} for kanban_list, cards in zip(lists, cards_per_list)
    ]
    all_cards = [card for cards in cards_per_list for card in cards]

    total_cards = len(all_cards)
    backlog_count = _count_in(lists_with_cards, BACKLOG)
    in_progress_count = _count_in(lists_with_cards, IN_PROGRESS)
    testing_count = _count_in(lists_with_cards, TESTING)
    done_count = _count_in(lists_with_cards, DONE)

    return {
        "board": board,
        "lists": lists_with_cards,
        "labels": labels,
        "stats": {
            "totalCards": total_cards,
            "backlogCount": backlog_count,
            "inProgressCount": in_progress_count,
            "testingCount": testing_count,
            "doneCount": done_count,
            "urgentCount": _count_labelled(all_cards, labels, URGENT_LABEL),
            "bugCount": _count_labelled(all_cards, labels, BUG_LABEL),
            "completionPercentage": _percentage(done_count, total_cards),
        },
        "workflowState": {
            "hasCardsInBacklog": backlog_count > 0,
            "hasCardsInProgress": in_progress_count > 0,
            "hasCardsInTesting": testing_count > 0,
            "nextActionSuggestion": next_action_suggestion(backlog_count, in_progress_count, testing_count),
        },
    }
