"""
Undo/Redo functionality for annotations.

History is a single linear list of actions with a cursor. Undo and redo move
the cursor and apply actions through the store's silent primitives, so they
never add entries of their own.
"""
import logging
from enum import Enum
from typing import TYPE_CHECKING, List

from .models import ActionType, HistoryAction

if TYPE_CHECKING:
    from .store import EditStore

logger = logging.getLogger(__name__)


class HistoryStatus(Enum):
    """Outcome of an undo or redo request."""

    UNDONE = "undone"
    REDONE = "redone"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REDO = "nothing_to_redo"

    @property
    def applied(self) -> bool:
        return self in (HistoryStatus.UNDONE, HistoryStatus.REDONE)


class HistoryEngine:
    """Manages undo/redo operations for an :class:`EditStore`."""

    def __init__(self, store: "EditStore", max_size: int = 0):
        """
        Initialize the history.

        Args:
            store: Store the recorded actions are applied to
            max_size: Maximum number of actions to keep; 0 keeps everything
        """
        self.store = store
        self.max_size = max_size
        self.actions: List[HistoryAction] = []
        # -1 means no action is currently applied
        self.history_index: int = -1

    def record(self, action: HistoryAction) -> None:
        """
        Append an action, discarding any redoable future.

        Args:
            action: Action describing a mutation that has already been applied
        """
        if self.history_index < len(self.actions) - 1:
            dropped = len(self.actions) - 1 - self.history_index
            del self.actions[self.history_index + 1:]
            logger.debug("Discarded %d redoable action(s)", dropped)

        self.actions.append(action)

        if self.max_size > 0 and len(self.actions) > self.max_size:
            del self.actions[:len(self.actions) - self.max_size]

        self.history_index = len(self.actions) - 1

    def can_undo(self) -> bool:
        return self.history_index >= 0

    def can_redo(self) -> bool:
        return self.history_index < len(self.actions) - 1

    def undo(self) -> HistoryStatus:
        """
        Revert the action under the cursor.

        Returns:
            UNDONE, or NOTHING_TO_UNDO when the cursor is before the first action
        """
        if not self.can_undo():
            return HistoryStatus.NOTHING_TO_UNDO

        action = self.actions[self.history_index]
        self._revert(action)
        self.history_index -= 1
        logger.debug("Undid %s %s", action.kind.value, action.target_id or "")
        return HistoryStatus.UNDONE

    def redo(self) -> HistoryStatus:
        """
        Re-apply the action after the cursor.

        Returns:
            REDONE, or NOTHING_TO_REDO when there is no future to replay
        """
        if not self.can_redo():
            return HistoryStatus.NOTHING_TO_REDO

        self.history_index += 1
        action = self.actions[self.history_index]
        self._apply(action)
        logger.debug("Redid %s %s", action.kind.value, action.target_id or "")
        return HistoryStatus.REDONE

    def clear(self) -> None:
        self.actions.clear()
        self.history_index = -1

    def __len__(self) -> int:
        return len(self.actions)

    def _revert(self, action: HistoryAction) -> None:
        store = self.store
        if action.kind == ActionType.ADD:
            store._remove(action.target_id)
        elif action.kind == ActionType.DELETE:
            entry = action.snapshot[0]
            store._insert(entry.page, entry.annotation, entry.index)
        elif action.kind == ActionType.MOVE:
            store._replace(action.before)
        elif action.kind == ActionType.CLEAR:
            # Ascending order puts every entry back at its original z-index
            for entry in sorted(action.snapshot, key=lambda e: (e.page, e.index)):
                store._insert(entry.page, entry.annotation, entry.index)

    def _apply(self, action: HistoryAction) -> None:
        store = self.store
        if action.kind == ActionType.ADD:
            store._insert(action.after.page, action.after)
        elif action.kind == ActionType.DELETE:
            store._remove(action.target_id)
        elif action.kind == ActionType.MOVE:
            store._replace(action.after)
        elif action.kind == ActionType.CLEAR:
            for entry in action.snapshot:
                store._remove(entry.annotation.id)
