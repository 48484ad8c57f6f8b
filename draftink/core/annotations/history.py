"""
Undo/Redo history for annotations.
"""
from typing import Optional, Tuple

from .models import AnnotationCollection


class HistoryStack:
    """
    Linear undo/redo history of whole-collection snapshots.

    The snapshot at ``index`` is always the collection being shown and
    edited. Pushing after an undo discards the undone future.
    """

    def __init__(self, initial: Optional[AnnotationCollection] = None,
                 max_size: Optional[int] = None):
        """
        Initialize the history.

        Args:
            initial: Collection loaded with the draft
            max_size: Maximum number of snapshots to keep, None for unbounded
        """
        self.max_size = max_size
        self._snapshots: Tuple[AnnotationCollection, ...] = ()
        self._index = 0
        self.reset(initial if initial is not None else AnnotationCollection())

    def reset(self, collection: AnnotationCollection) -> None:
        """Start a fresh history holding only ``collection``."""
        self._snapshots = (collection,)
        self._index = 0

    @property
    def current(self) -> AnnotationCollection:
        return self._snapshots[self._index]

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._snapshots)

    def push(self, collection: AnnotationCollection) -> AnnotationCollection:
        """
        Record a new current collection.

        Args:
            collection: The collection produced by an edit

        Returns:
            The new current collection
        """
        snapshots = self._snapshots[:self._index + 1] + (collection,)

        if self.max_size is not None and len(snapshots) > self.max_size:
            snapshots = snapshots[len(snapshots) - self.max_size:]

        self._snapshots = snapshots
        self._index = len(snapshots) - 1
        return collection

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def undo(self) -> Optional[AnnotationCollection]:
        """
        Step back one snapshot.

        Returns:
            The new current collection, or None at the oldest snapshot
        """
        if not self.can_undo():
            return None
        self._index -= 1
        return self.current

    def redo(self) -> Optional[AnnotationCollection]:
        """
        Step forward one snapshot.

        Returns:
            The new current collection, or None at the newest snapshot
        """
        if not self.can_redo():
            return None
        self._index += 1
        return self.current
