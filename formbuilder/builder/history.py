from typing import Generic, List, Optional, TypeVar

from ..core.config import HISTORY_LIMIT

T = TypeVar("T")


class History(Generic[T]):
    """Begrenzte Undo/Redo-Historie unveränderlicher Snapshots.

    ``set`` verwirft den Redo-Teil und hängt den neuen Zustand an; ist das
    Limit erreicht, fällt der älteste Eintrag weg.
    """

    def __init__(self, initial: T, limit: Optional[int] = None):
        self.limit = max(1, limit if limit is not None else HISTORY_LIMIT)
        self._entries: List[T] = [initial]
        self._index = 0

    @property
    def state(self) -> T:
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def set(self, state: T) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(state)
        if len(self._entries) > self.limit:
            del self._entries[: len(self._entries) - self.limit]
        self._index = len(self._entries) - 1

    def undo(self) -> Optional[T]:
        if not self.can_undo:
            return None
        self._index -= 1
        return self.state

    def redo(self) -> Optional[T]:
        if not self.can_redo:
            return None
        self._index += 1
        return self.state

    def reset(self, state: T) -> None:
        self._entries = [state]
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)
