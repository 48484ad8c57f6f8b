"""
Transparent widget laid over a rendered page that shows and edits annotations.
"""
from typing import Optional

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QColor, QFont, QMouseEvent, QPainter, QPainterPath, QPen
from PyQt5.QtWidgets import QLineEdit, QWidget

from draftink.controllers import AnnotationController
from draftink.core.annotations import AnnotationType, EditMode, InkAnnotation, TextAnnotation
from draftink.core.coords import Viewport, pdf_to_viewport


class AnnotationLayer(QWidget):
    """
    Annotation layer for one page.

    Mouse and keyboard input is forwarded to the page's interaction state
    machine; painting always reads the controller's current collection.
    """

    def __init__(self, controller: AnnotationController, page_index: int,
                 viewport: Viewport, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self.controller = controller
        self.page_index = page_index
        self.viewport = viewport
        self.interaction = controller.interaction_for_page(page_index, viewport)

        # The release that follows a double click must not count as a click
        self._swallow_click = False

        self._editor = QLineEdit(self)
        self._editor.hide()
        self._editor.textEdited.connect(self.interaction.edit_text)
        self._editor.returnPressed.connect(self._on_editor_return)
        self._editor.editingFinished.connect(self._on_editor_finished)

        self.setAttribute(Qt.WA_TranslucentBackground)
        self.setMouseTracking(True)
        # Presses on the layer must reach the state machine before the editor blurs
        self.setFocusPolicy(Qt.NoFocus)
        self.setFixedSize(int(viewport.width_px), int(viewport.height_px))

        controller.annotations_changed.connect(self.update)

    def set_viewport(self, viewport: Viewport):
        """Update zoom level."""
        self.viewport = viewport
        self.interaction.set_viewport(viewport)
        self.setFixedSize(int(viewport.width_px), int(viewport.height_px))
        self._sync_editor()
        self.update()

    # Mouse event handlers

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        self.interaction.pointer_down(event.pos().x(), event.pos().y())
        self._after_event()

    def mouseMoveEvent(self, event: QMouseEvent):
        if self.interaction.is_drawing or self.interaction.is_dragging:
            self.interaction.pointer_move(event.pos().x(), event.pos().y())
            self._after_event()
            return

        over_box = self.interaction.annotation_at(event.pos().x(), event.pos().y()) is not None
        if self.controller.mode == EditMode.INK_DRAW:
            self.setCursor(Qt.CrossCursor)
        elif self.controller.mode == EditMode.TEXT_INSERT:
            self.setCursor(Qt.IBeamCursor)
        else:
            self.setCursor(Qt.OpenHandCursor if over_box else Qt.ArrowCursor)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)

        x, y = event.pos().x(), event.pos().y()
        self.interaction.pointer_up(x, y)

        if self._swallow_click:
            self._swallow_click = False
        else:
            self.interaction.click(x, y)

        self._after_event()

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mouseDoubleClickEvent(event)

        self._swallow_click = True
        self.interaction.double_click(event.pos().x(), event.pos().y())
        self._after_event()

    def leaveEvent(self, event):
        self.interaction.pointer_leave()
        self._after_event()
        super().leaveEvent(event)

    # Editor

    def _on_editor_return(self):
        self.interaction.key_enter()
        self._after_event()

    def _on_editor_finished(self):
        self.interaction.commit_edit()
        self._after_event()

    def _sync_editor(self):
        """Show the inline editor over the annotation being edited, if any."""
        editing_id = self.interaction.editing_id
        annotation = self.controller.current.get(editing_id) if editing_id else None

        if annotation is None:
            if not self._editor.isHidden():
                self._editor.hide()
            return

        left, top, right, bottom = self.interaction.text_box(annotation)
        font = QFont()
        font.setPixelSize(max(1, int(annotation.font_size_pt * self.viewport.scale)))
        self._editor.setFont(font)
        self._editor.setGeometry(int(left), int(top), int(right - left), int(bottom - top))

        if self._editor.isHidden():
            self._editor.setText(self.interaction.state.buffer)
            self._editor.show()
            self._editor.setFocus()

    def _after_event(self):
        self._sync_editor()
        self.update()

    # Painting

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        for annotation in self.controller.current.for_page(self.page_index):
            if annotation.annotation_type == AnnotationType.INK:
                self._paint_ink(painter, annotation)
            elif annotation.annotation_type == AnnotationType.TEXT:
                if annotation.id != self.interaction.editing_id:
                    self._paint_text(painter, annotation)

        if self.interaction.is_drawing:
            self._paint_drawing_preview(painter)

        painter.end()

    def _paint_ink(self, painter: QPainter, annotation: InkAnnotation):
        pen = QPen(QColor(annotation.color))
        pen.setWidthF(annotation.thickness_pt * self.viewport.scale)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)

        for stroke in annotation.strokes:
            if len(stroke) < 2:
                continue
            path = QPainterPath()
            for i, (x_pt, y_pt) in enumerate(stroke):
                point = QPointF(*pdf_to_viewport(x_pt, y_pt, self.viewport))
                if i == 0:
                    path.moveTo(point)
                else:
                    path.lineTo(point)
            painter.drawPath(path)

    def _paint_text(self, painter: QPainter, annotation: TextAnnotation):
        left, top, right, bottom = self.interaction.text_box(annotation)
        rect = QRectF(left, top, right - left, bottom - top)

        if self.controller.mode == EditMode.BROWSE:
            border = QPen(QColor(26, 115, 232, 120))
            border.setStyle(Qt.DashLine)
            painter.setPen(border)
            painter.setBrush(Qt.NoBrush)
            painter.drawRect(rect)

        font = QFont()
        font.setPixelSize(max(1, int(annotation.font_size_pt * self.viewport.scale)))
        painter.setFont(font)
        painter.setPen(QColor(annotation.color))
        painter.drawText(rect, Qt.AlignLeft | Qt.AlignTop | Qt.TextDontClip, annotation.text)

    def _paint_drawing_preview(self, painter: QPainter):
        points = self.interaction.pending_stroke
        if len(points) < 2:
            return

        painter.setPen(QPen(QColor(0, 0, 255), 2, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin))
        path = QPainterPath(QPointF(*points[0]))
        for x, y in points[1:]:
            path.lineTo(QPointF(x, y))
        painter.drawPath(path)
