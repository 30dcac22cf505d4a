"""Pydantic models describing the Planka entities returned by the REST API."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict

LabelColor = Literal[
    "berry-red",
    "pumpkin-orange",
    "lagoon-blue",
    "pink-tulip",
    "light-mud",
    "orange-peel",
    "bright-moss",
    "antique-blue",
    "dark-granite",
    "lagune-blue",
    "sunny-grass",
    "morning-sky",
    "light-orange",
    "midnight-blue",
    "tank-green",
    "gun-metal",
    "wet-moss",
    "red-burgundy",
    "light-concrete",
    "apricot-red",
    "desert-sand",
    "navy-blue",
    "egg-yellow",
    "coral-green",
    "light-cocoa",
]

# Fixed label palette accepted by Planka
LABEL_COLORS: tuple[str, ...] = get_args(LabelColor)


class PlankaEntity(BaseModel):
    """Base for all entities. Unknown fields are kept so nothing is lost on the way through."""

    model_config = ConfigDict(extra="allow")

    id: str


class User(PlankaEntity):
    email: str
    name: str | None = None
    username: str


class Project(PlankaEntity):
    name: str


class Board(PlankaEntity):
    projectId: str
    name: str
    position: float = 0


class KanbanList(PlankaEntity):
    """A board column. Archive/trash lists have no name."""

    boardId: str
    name: str | None = None
    position: float | None = None


class Stopwatch(BaseModel):
    startedAt: str | None = None
    total: float = 0


class Card(PlankaEntity):
    listId: str
    name: str
    description: str | None = None
    position: float | None = None
    dueDate: str | None = None
    isCompleted: bool | None = None
    stopwatch: Stopwatch | None = None
    createdAt: str
    updatedAt: str | None = None


class Task(PlankaEntity):
    """A checklist item. Planka 2.x hangs tasks off a task list rather than the card."""

    cardId: str | None = None
    taskListId: str | None = None
    name: str
    isCompleted: bool = False
    position: float | None = None
    createdAt: str
    updatedAt: str | None = None


class Comment(PlankaEntity):
    cardId: str
    userId: str | None = None
    text: str | None = None
    createdAt: str
    updatedAt: str | None = None


class Label(PlankaEntity):
    boardId: str
    name: str | None = None
    color: LabelColor
    position: float | None = None


class CardLabel(PlankaEntity):
    cardId: str
    labelId: str


class BoardMembership(PlankaEntity):
    boardId: str
    userId: str
    role: str
