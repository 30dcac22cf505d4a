"""
Abstract resource access interface consumed by the aggregators.

The aggregators in activity.py, board_summary.py and composite.py only talk
to this interface, so they can be driven by the HTTP client or by an
in-memory fake in tests.

Implementations raise PlankaAPIError for every failed fetch or write. The
activity feed only skips PlankaAPIError from nested fetches; other exception
types fail the whole call.
"""

from abc import ABC, abstractmethod
from typing import Any


class ResourceAccessor(ABC):
    """Read/write access to the kanban hierarchy: project > board > list > card > task/comment."""

    @abstractmethod
    def list_boards(self, project_id: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_board(self, board_id: str) -> dict[str, Any] | None:
        """Return the board, or None when it does not exist."""
        pass

    @abstractmethod
    def list_lists(self, board_id: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def list_cards(self, list_id: str, board_id: str | None = None) -> list[dict[str, Any]]:
        """
        List the cards of a list.

        Args:
            list_id: The list to read
            board_id: The owning board, when the caller already knows it
        """
        pass

    @abstractmethod
    def list_tasks(self, card_id: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def list_comments(self, card_id: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def list_labels(self, board_id: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def list_users(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def create_card(
        self,
        list_id: str,
        name: str,
        description: str = "",
        position: int = 65535,
        type: str = "project",
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def create_task(self, card_id: str, name: str, position: int = 65535) -> dict[str, Any]:
        pass

    @abstractmethod
    def create_comment(self, card_id: str, text: str) -> dict[str, Any]:
        pass
