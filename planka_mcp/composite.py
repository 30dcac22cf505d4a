"""
Create a card together with its tasks and an opening comment.

This is three kinds of write issued one after another. It is NOT atomic:
when a task or the comment fails, the card and the tasks created before the
failure stay on the board. Nothing is rolled back. The result says exactly
which steps went through so the caller can finish or clean up.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .accessor import ResourceAccessor
from .client import POSITION_GAP, PlankaAPIError

logger = logging.getLogger(__name__)


@dataclass
class CardCreationResult:
    """Outcome of create_card_with_tasks, including partial progress."""

    card: dict[str, Any]
    tasks: list[dict[str, Any]] = field(default_factory=list)
    comment: dict[str, Any] | None = None
    requested_tasks: int = 0
    comment_requested: bool = False
    failed_step: str | None = None
    error: str | None = None

    @property
    def complete(self) -> bool:
        return self.failed_step is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "card": self.card,
            "tasks": self.tasks,
            "comment": self.comment,
            "complete": self.complete,
            "steps": {
                "cardCreated": True,
                "tasksCreated": len(self.tasks),
                "tasksRequested": self.requested_tasks,
                "commentCreated": self.comment is not None,
                "commentRequested": self.comment_requested,
            },
            "failedStep": self.failed_step,
            "error": self.error,
            "rolledBack": False,
        }


def create_card_with_tasks(
    accessor: ResourceAccessor,
    list_id: str,
    name: str,
    description: str | None = None,
    tasks: list[str] | None = None,
    comment: str | None = None,
    position: int | None = None,
    type: str | None = None,
) -> CardCreationResult:
    """
    Create a card, then its tasks in order, then an optional comment.

    Task i is placed at 65535 * (i + 1). If the card itself cannot be created
    nothing has happened and the error is raised. Any later failure stops the
    sequence and is reported in the returned result (failed_step, error)
    while the writes already made are kept.

    Args:
        accessor: Where to create the card, tasks and comment
        list_id: The id of the list to create the card in
        name: Card name
        description: Card description (optional)
        tasks: Task names, created in this order (optional)
        comment: Comment text to attach after the tasks (optional)
        position: Card position in the list (default: 65535)
        type: Card type (default: 'project')

    Raises:
        PlankaAPIError: "Failed to create card: ..." when the card is not created
    """
    task_names = tasks or []

    try:
        card = accessor.create_card(
            list_id=list_id,
            name=name,
            description=description or "",
            position=position if position is not None else POSITION_GAP,
            type=type or "project",
        )
    except PlankaAPIError as e:
        raise PlankaAPIError.wrap("create card", e) from e

    result = CardCreationResult(card=card, requested_tasks=len(task_names), comment_requested=bool(comment))

    for index, task_name in enumerate(task_names):
        try:
            task = accessor.create_task(card["id"], task_name, position=POSITION_GAP * (index + 1))
        except PlankaAPIError as e:
            result.failed_step = f"task {index + 1} of {len(task_names)} ({task_name!r})"
            result.error = str(e)
            logger.warning(
                f"Card {card['id']} left partially created: {result.failed_step} failed after "
                f"{len(result.tasks)} task(s): {e}"
            )
            return result
        result.tasks.append(task)

    if comment:
        try:
            result.comment = accessor.create_comment(card["id"], comment)
        except PlankaAPIError as e:
            result.failed_step = "comment"
            result.error = str(e)
            logger.warning(f"Card {card['id']} created with all tasks but the comment failed: {e}")

    return result
