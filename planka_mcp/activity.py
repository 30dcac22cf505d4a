"""
Project activity feed.

Planka keeps no change log, so the feed is rebuilt on every call by walking
project > boards > lists > cards > tasks/comments and classifying each
entity's createdAt/updatedAt against a time window.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .accessor import ResourceAccessor
from .client import PlankaAPIError
from .utils import format_timestamp, parse_timestamp, truncate_text, utc_now

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)
DEFAULT_MAX_COMMENTS = 20
PREVIEW_LENGTH = 100

CARD_CREATED = "card_created"
CARD_UPDATED = "card_updated"
CARD_COMPLETED = "card_completed"
COMMENT_ADDED = "comment_added"
TASK_CREATED = "task_created"
TASK_COMPLETED = "task_completed"


@dataclass
class ActivityEntry:
    """One reconstructed change. Optional fields are only present for the kinds that use them."""

    timestamp: str
    type: str
    boardId: str
    listId: str
    cardId: str
    taskId: str | None = None
    commentId: str | None = None
    userId: str | None = None
    preview: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class ActivityWindow:
    """Inclusive [start, end] instant range."""

    start: datetime
    end: datetime

    def contains(self, value: str | None) -> bool:
        moment = parse_timestamp(value)
        if moment is None:
            return False
        return self.start <= moment <= self.end


@dataclass
class _FeedState:
    window: ActivityWindow
    max_comments: int
    changes: list[ActivityEntry] = field(default_factory=list)
    affected_cards: dict[str, dict[str, str]] = field(default_factory=dict)
    user_ids: dict[str, None] = field(default_factory=dict)
    new_cards: int = 0
    updated_cards: int = 0
    completed_cards: int = 0
    new_comments: int = 0
    new_tasks: int = 0
    completed_tasks: int = 0


def resolve_window(since: str | None = None, until: str | None = None, now: datetime | None = None) -> ActivityWindow:
    """
    Build the query window. `until` defaults to now and `since` to 24 hours
    before `until`.

    Raises:
        ValueError: If since or until is not an ISO-8601 timestamp
    """
    end = now or utc_now()
    if until:
        end = parse_timestamp(until)
        if end is None:
            raise ValueError(f"Invalid 'until' timestamp: {until}")

    start = end - DEFAULT_WINDOW
    if since:
        start = parse_timestamp(since)
        if start is None:
            raise ValueError(f"Invalid 'since' timestamp: {since}")

    return ActivityWindow(start=start, end=end)


def _sort_key(entry: ActivityEntry) -> datetime:
    return parse_timestamp(entry.timestamp)


def _collect_card(
    state: _FeedState,
    accessor: ResourceAccessor,
    card: dict[str, Any],
    board_id: str,
    list_id: str,
) -> None:
    window = state.window
    card_id = card["id"]
    touched = False

    def record(kind: str, timestamp: str, **extra: Any) -> None:
        state.changes.append(
            ActivityEntry(timestamp=timestamp, type=kind, boardId=board_id, listId=list_id, cardId=card_id, **extra)
        )

    # Creation wins over update so a card never yields two card events per call
    if window.contains(card.get("createdAt")):
        record(CARD_CREATED, card["createdAt"])
        state.new_cards += 1
        touched = True
    elif window.contains(card.get("updatedAt")):
        if card.get("isCompleted"):
            record(CARD_COMPLETED, card["updatedAt"])
            state.completed_cards += 1
        else:
            record(CARD_UPDATED, card["updatedAt"])
            state.updated_cards += 1
        touched = True

    # Accessors report API failures as PlankaAPIError; anything else is a bug and fails the feed
    try:
        tasks = accessor.list_tasks(card_id)
    except PlankaAPIError as e:
        logger.debug(f"Skipping tasks of card {card_id}: {e}")
        tasks = []

    for task in tasks:
        if window.contains(task.get("createdAt")):
            record(TASK_CREATED, task["createdAt"], taskId=task["id"])
            state.new_tasks += 1
            touched = True
        elif task.get("isCompleted") and window.contains(task.get("updatedAt")):
            record(TASK_COMPLETED, task["updatedAt"], taskId=task["id"])
            state.completed_tasks += 1
            touched = True

    try:
        comments = accessor.list_comments(card_id)
    except PlankaAPIError as e:
        logger.debug(f"Skipping comments of card {card_id}: {e}")
        comments = []

    for comment in comments:
        if not window.contains(comment.get("createdAt")):
            continue
        # The cap limits how many entries are spelled out, not what is counted
        if state.new_comments < state.max_comments:
            text = comment.get("text") or (comment.get("data") or {}).get("text") or ""
            record(
                COMMENT_ADDED,
                comment["createdAt"],
                commentId=comment["id"],
                userId=comment.get("userId"),
                preview=truncate_text(text, PREVIEW_LENGTH),
            )
        if comment.get("userId"):
            state.user_ids[comment["userId"]] = None
        state.new_comments += 1
        touched = True

    if touched:
        state.affected_cards[card_id] = {
            "cardId": card_id,
            "cardName": card.get("name"),
            "boardId": board_id,
            "listId": list_id,
        }


def get_activity_feed(
    accessor: ResourceAccessor,
    project_id: str,
    since: str | None = None,
    until: str | None = None,
    max_comments: int = DEFAULT_MAX_COMMENTS,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Reconstruct what changed in a project during a time window.

    Boards, lists and cards are read one at a time. A card whose tasks or
    comments cannot be fetched contributes no task/comment events instead
    of failing the feed; failing to read the boards, lists or cards
    themselves fails the whole call.

    Args:
        accessor: Source of boards, lists, cards, tasks and comments
        project_id: The id of the project
        since: Window start, ISO-8601 (default: 24 hours before `until`)
        until: Window end, ISO-8601 (default: now)
        max_comments: Maximum comment_added entries listed in 'changes'
        now: Reference time for the default window

    Returns:
        Dict with 'query', 'summary' (per-kind counters), 'changes' (newest
        first), 'affectedCards' and 'userIds'

    Raises:
        PlankaAPIError: "Failed to get activity feed: ..." on any fatal error
    """
    try:
        window = resolve_window(since, until, now)
        state = _FeedState(window=window, max_comments=max_comments)

        for board in accessor.list_boards(project_id):
            board_id = board["id"]
            for kanban_list in accessor.list_lists(board_id):
                list_id = kanban_list["id"]
                for card in accessor.list_cards(list_id, board_id=board_id):
                    _collect_card(state, accessor, card, board_id, list_id)

        # sorted() is stable, so equal timestamps keep traversal order
        changes = sorted(state.changes, key=_sort_key, reverse=True)
    except Exception as e:
        raise PlankaAPIError.wrap("get activity feed", e) from e

    logger.info(f"Activity feed for project {project_id}: {len(changes)} change(s)")

    return {
        "query": {
            "projectId": project_id,
            "from": format_timestamp(window.start),
            "to": format_timestamp(window.end),
        },
        "summary": {
            "totalChanges": len(changes),
            "newCards": state.new_cards,
            "updatedCards": state.updated_cards,
            "completedCards": state.completed_cards,
            "newComments": state.new_comments,
            "newTasks": state.new_tasks,
            "completedTasks": state.completed_tasks,
        },
        "changes": [entry.to_dict() for entry in changes],
        "affectedCards": list(state.affected_cards.values()),
        "userIds": list(state.user_ids),
    }


def resolve_users(accessor: ResourceAccessor, user_ids: list[str]) -> dict[str, dict[str, Any]]:
    """
    Map user ids to {id, name, username, email}.

    The user collection is fetched once. Unknown ids are left out of the
    result rather than reported as errors.

    Raises:
        PlankaAPIError: "Failed to resolve users: ..." if the users cannot be listed
    """
    try:
        users = accessor.list_users()
    except PlankaAPIError as e:
        raise PlankaAPIError.wrap("resolve users", e) from e

    by_id = {user["id"]: user for user in users}
    resolved: dict[str, dict[str, Any]] = {}
    for user_id in user_ids:
        user = by_id.get(user_id)
        if user is not None:
            resolved[user_id] = {
                "id": user["id"],
                "name": user.get("name"),
                "username": user.get("username"),
                "email": user.get("email"),
            }
    return resolved
