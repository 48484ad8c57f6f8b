"""
Pointer and keyboard interaction for the annotation layer of one page.

The mode decides what a new gesture creates. The gesture state says what the
pointer is doing right now; it is a single value, so combinations such as
dragging while editing cannot exist.

All pointer coordinates handed to this module are viewport pixels relative
to the page's top-left corner. Anything emitted is in PDF points.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from draftink.core.coords import Point, Viewport, pdf_to_viewport, points_to_pdf, viewport_to_pdf

from .models import (
    DEFAULT_COLOR,
    DEFAULT_FONT_SIZE_PT,
    DEFAULT_THICKNESS_PT,
    PLACEHOLDER_TEXT,
    AnnotationCollection,
    AnnotationType,
    InkAnnotation,
    TextAnnotation,
)

logger = logging.getLogger(__name__)


class EditMode(Enum):
    BROWSE = "browse"
    TEXT_INSERT = "text"
    INK_DRAW = "ink"


# ==============================================================================
# Gesture states
# ==============================================================================


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Drawing:
    points: Tuple[Point, ...]  # viewport pixels


@dataclass(frozen=True)
class Dragging:
    annotation_id: str
    offset: Point  # pointer minus box top-left, in pixels


@dataclass(frozen=True)
class EditingText:
    annotation_id: str
    buffer: str


@dataclass(frozen=True)
class EditClosing:
    """An edit was committed by a pointer press; the matching click is consumed."""
    pass


GestureState = Union[Idle, Drawing, Dragging, EditingText, EditClosing]

IDLE = Idle()


@dataclass
class StyleContext:
    """Style applied to newly created annotations."""
    font_size_pt: float = DEFAULT_FONT_SIZE_PT
    color: str = DEFAULT_COLOR
    thickness_pt: float = DEFAULT_THICKNESS_PT


class AnnotationInteraction:
    """
    Edit state machine for a single page.

    ``history`` is anything exposing ``current`` (the collection being
    edited) and ``push(collection)``; every change is pushed as a whole new
    collection.
    """

    def __init__(self, page_index: int, viewport: Viewport, history,
                 style: Optional[StyleContext] = None,
                 mode: EditMode = EditMode.BROWSE):
        self.page_index = page_index
        self.viewport = viewport
        self.history = history
        self.style = style if style is not None else StyleContext()
        self.mode = mode
        self.state: GestureState = IDLE

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_mode(self, mode: EditMode) -> None:
        """Switch tools. An unfinished stroke is dropped, a pending edit committed."""
        if isinstance(self.state, EditingText):
            self.commit_edit()
        self.state = IDLE
        self.mode = mode

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport

    def cancel(self) -> None:
        """Drop whatever gesture is in progress without emitting anything."""
        self.state = IDLE

    @property
    def is_drawing(self) -> bool:
        return isinstance(self.state, Drawing)

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    @property
    def editing_id(self) -> Optional[str]:
        if isinstance(self.state, EditingText):
            return self.state.annotation_id
        return None

    @property
    def pending_stroke(self) -> Tuple[Point, ...]:
        """Points of the stroke being drawn, in pixels."""
        if isinstance(self.state, Drawing):
            return self.state.points
        return ()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def text_box(self, annotation: TextAnnotation) -> Tuple[float, float, float, float]:
        """Rendered box of a text annotation as (left, top, right, bottom) pixels."""
        left, top = pdf_to_viewport(annotation.x_pt, annotation.y_pt, self.viewport)
        return (
            left,
            top,
            left + annotation.width_pt * self.viewport.scale,
            top + annotation.height_pt * self.viewport.scale,
        )

    def annotation_at(self, x: float, y: float) -> Optional[TextAnnotation]:
        """
        Find the topmost text box under a pointer position.

        Args:
            x: X coordinate in pixels
            y: Y coordinate in pixels

        Returns:
            The text annotation under the pointer, or None
        """
        for ann in reversed(self.history.current.for_page(self.page_index)):
            if ann.annotation_type != AnnotationType.TEXT:
                continue
            left, top, right, bottom = self.text_box(ann)
            if left <= x <= right and top <= y <= bottom:
                return ann
        return None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        if isinstance(self.state, EditingText):
            # Pressing outside the editor blurs it
            self._commit(self.state)
            self.state = EditClosing()
            return

        if isinstance(self.state, (Drawing, Dragging)):
            return

        if self.mode == EditMode.INK_DRAW:
            self.state = Drawing(points=((x, y),))
            return

        if self.mode == EditMode.BROWSE:
            target = self.annotation_at(x, y)
            if target is not None:
                left, top, _, _ = self.text_box(target)
                self.state = Dragging(annotation_id=target.id, offset=(x - left, y - top))
                return

        self.state = IDLE

    def pointer_move(self, x: float, y: float) -> None:
        state = self.state

        if isinstance(state, Drawing):
            self.state = Drawing(points=state.points + ((x, y),))

        elif isinstance(state, Dragging):
            new_left = x - state.offset[0]
            new_top = y - state.offset[1]
            x_pt, y_pt = viewport_to_pdf(new_left, new_top, self.viewport)
            self._emit(self.history.current.update(state.annotation_id, x_pt=x_pt, y_pt=y_pt))

    def pointer_up(self, x: float, y: float) -> Optional[InkAnnotation]:
        """
        Finish the current pointer gesture.

        Returns:
            The ink annotation created by a finished stroke, if any
        """
        state = self.state

        if isinstance(state, Drawing):
            self.state = IDLE
            if len(state.points) < 2:
                logger.debug("Discarded stroke with %d point(s)", len(state.points))
                return None

            stroke = points_to_pdf(state.points, self.viewport)
            annotation = InkAnnotation(
                page_index=self.page_index,
                strokes=(stroke,),
                color=self.style.color,
                thickness_pt=self.style.thickness_pt,
            )
            self._emit(self.history.current.add(annotation))
            return annotation

        if isinstance(state, Dragging):
            self.state = IDLE

        return None

    def pointer_leave(self) -> Optional[InkAnnotation]:
        """Leaving the layer ends a stroke or drag like a release does."""
        return self.pointer_up(0.0, 0.0)

    def click(self, x: float, y: float) -> Optional[TextAnnotation]:
        """
        Handle a completed click.

        Returns:
            The text annotation inserted by the click, if any
        """
        state = self.state

        if isinstance(state, EditingText):
            self._commit(state)
            self.state = IDLE
            return None

        if isinstance(state, EditClosing):
            self.state = IDLE
            return None

        if not isinstance(state, Idle) or self.mode != EditMode.TEXT_INSERT:
            return None

        if self.annotation_at(x, y) is not None:
            return None

        x_pt, y_pt = viewport_to_pdf(x, y, self.viewport)
        annotation = TextAnnotation(
            page_index=self.page_index,
            x_pt=x_pt,
            y_pt=y_pt,
            text=PLACEHOLDER_TEXT,
            font_size_pt=self.style.font_size_pt,
            color=self.style.color,
        )
        self._emit(self.history.current.add(annotation))
        return annotation

    def double_click(self, x: float, y: float) -> Optional[str]:
        """
        Open the text annotation under the pointer for editing.

        Returns:
            Id of the annotation being edited, or None
        """
        target = self.annotation_at(x, y)
        if target is None:
            return None
        return self.begin_edit(target.id)

    # ------------------------------------------------------------------
    # Text editing
    # ------------------------------------------------------------------

    def begin_edit(self, annotation_id: str) -> Optional[str]:
        annotation = self.history.current.get(annotation_id)
        if annotation is None or annotation.annotation_type != AnnotationType.TEXT:
            return None

        if isinstance(self.state, EditingText):
            self._commit(self.state)

        self.state = EditingText(annotation_id=annotation_id, buffer=annotation.text)
        return annotation_id

    def edit_text(self, value: str) -> None:
        """Replace the text being typed into the open editor."""
        if isinstance(self.state, EditingText):
            self.state = EditingText(annotation_id=self.state.annotation_id, buffer=value)

    def commit_edit(self) -> None:
        """Commit the open editor (blur)."""
        if isinstance(self.state, EditingText):
            self._commit(self.state)
            self.state = IDLE

    def key_enter(self) -> None:
        self.commit_edit()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, state: EditingText) -> None:
        current = self.history.current
        annotation = current.get(state.annotation_id)
        # Unchanged text is not an edit
        if annotation is not None and annotation.text != state.buffer:
            self._emit(current.update(state.annotation_id, text=state.buffer))

    def _emit(self, collection: AnnotationCollection) -> None:
        self.history.push(collection)
