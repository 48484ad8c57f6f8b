"""
Controller for managing annotation operations.
"""
from typing import Dict, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from draftink.core.annotations import (
    Annotation,
    AnnotationCollection,
    AnnotationInteraction,
    EditMode,
    HistoryStack,
    StyleContext,
)
from draftink.core.coords import Viewport


class AnnotationController(QObject):
    """
    Owns the annotation history of an open draft and the per-page
    interaction state machines that edit it.
    """

    # Signals
    annotations_changed = pyqtSignal()  # Emitted when the current collection changes
    history_changed = pyqtSignal(bool, bool)  # can_undo, can_redo

    def __init__(self, parent: Optional[QObject] = None, max_history: Optional[int] = None):
        super().__init__(parent)
        self.history = HistoryStack(max_size=max_history)
        self.style = StyleContext()
        self.mode = EditMode.BROWSE
        self._interactions: Dict[int, AnnotationInteraction] = {}
        self._saved = self.history.current

    # History-facing interface used by the interactions

    @property
    def current(self) -> AnnotationCollection:
        return self.history.current

    @property
    def annotations(self) -> AnnotationCollection:
        return self.history.current

    def push(self, collection: AnnotationCollection) -> None:
        """Record a new collection and notify listeners."""
        self.history.push(collection)
        self._notify()

    # Draft lifecycle

    def load(self, collection: AnnotationCollection) -> None:
        """
        Start editing a freshly loaded draft.

        Args:
            collection: Annotations stored with the draft
        """
        self.history.reset(collection)
        self._saved = collection
        for interaction in self._interactions.values():
            interaction.cancel()
        self._notify()

    def mark_saved(self) -> None:
        """Mark the current collection as the saved state."""
        self._saved = self.history.current

    @property
    def has_unsaved_changes(self) -> bool:
        return self.history.current != self._saved

    # Edits

    def add_annotation(self, annotation: Annotation) -> None:
        self.push(self.current.add(annotation))

    def update_annotation(self, annotation_id: str, **changes) -> bool:
        """
        Update an existing annotation.

        Returns:
            True if the annotation was found and updated
        """
        if annotation_id not in self.current:
            return False
        self.push(self.current.update(annotation_id, **changes))
        return True

    def remove_annotation(self, annotation_id: str) -> bool:
        if annotation_id not in self.current:
            return False
        self.push(self.current.remove(annotation_id))
        return True

    def undo(self) -> bool:
        """
        Undo the last annotation action.

        Returns:
            True if undo was successful
        """
        if self.history.undo() is None:
            return False
        self._notify()
        return True

    def redo(self) -> bool:
        """
        Redo the last undone annotation action.

        Returns:
            True if redo was successful
        """
        if self.history.redo() is None:
            return False
        self._notify()
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # Tools

    def set_mode(self, mode: EditMode) -> None:
        self.mode = mode
        for interaction in self._interactions.values():
            interaction.set_mode(mode)

    def set_style(self, font_size_pt: Optional[float] = None, color: Optional[str] = None,
                  thickness_pt: Optional[float] = None) -> None:
        """Change the style used for annotations created from now on."""
        if font_size_pt is not None:
            self.style.font_size_pt = font_size_pt
        if color is not None:
            self.style.color = color
        if thickness_pt is not None:
            self.style.thickness_pt = thickness_pt

    def interaction_for_page(self, page_index: int, viewport: Viewport) -> AnnotationInteraction:
        """Get (or create) the interaction state machine for one page."""
        interaction = self._interactions.get(page_index)
        if interaction is None:
            interaction = AnnotationInteraction(page_index, viewport, self,
                                                style=self.style, mode=self.mode)
            self._interactions[page_index] = interaction
        else:
            interaction.set_viewport(viewport)
        return interaction

    def _notify(self) -> None:
        self.annotations_changed.emit()
        self.history_changed.emit(self.can_undo(), self.can_redo())
