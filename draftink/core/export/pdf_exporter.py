import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Tuple

import fitz  # PyMuPDF

from draftink.core.annotations import Annotation, AnnotationType, annotation_from_dict
from draftink.core.coords import Viewport, pdf_to_viewport
from draftink.core.errors import ExportFailure, NotFoundError
from draftink.utils.config import StoragePaths

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "yes", "on", "1", "checked"}


def hex_to_rgb(color: str) -> Tuple[float, float, float]:
    """
    Convert ``#rrggbb`` or ``#rgb`` to a PyMuPDF color (0-1 range).

    Unreadable colors render black.
    """
    value = (color or "").strip().lstrip('#')
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    try:
        if len(value) != 6:
            raise ValueError(value)
        return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    except ValueError:
        logger.warning("Unreadable color %r, using black", color)
        return (0.0, 0.0, 0.0)


class PDFExporter:
    """Flattens a draft into a final PDF."""

    def __init__(self, paths: StoragePaths):
        self.paths = paths

    def export_draft(self, template_path: str, draft_id: str, user_id: str,
                     form_data: Any, annotations_json: Optional[str] = None,
                     drawing_image_path: Optional[str] = None) -> str:
        """
        Burn form values, annotations and the drawing into a copy of the template.

        The result always lands at the same path for a given user and draft,
        replacing the previous export. A failed export leaves that path as it
        was.

        Args:
            template_path: Stored template PDF
            draft_id: Draft being exported
            user_id: Owner of the draft
            form_data: Field name to value mapping
            annotations_json: Serialized annotation collection
            drawing_image_path: PNG drawing layer, optional

        Returns:
            Path of the exported PDF

        Raises:
            NotFoundError: The template file does not exist
            ExportFailure: The PDF could not be composed
        """
        if not template_path or not os.path.isfile(template_path):
            raise NotFoundError(f"Template file not found: {template_path}")

        annotations = self._load_annotations(annotations_json)
        output_path = self.paths.export_path(user_id, draft_id)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_path.parent)
        os.close(temp_fd)

        try:
            doc = fitz.open(template_path)
            try:
                self._fill_form(doc, form_data)
                # Turn widgets and existing annotations into page content
                doc.bake()

                # Group annotations by page for efficiency
                annotations_by_page: Dict[int, List[Annotation]] = {}
                for ann in annotations:
                    annotations_by_page.setdefault(ann.page_index, []).append(ann)

                for page_idx, page_annotations in annotations_by_page.items():
                    if not 0 <= page_idx < len(doc):
                        logger.warning("Skipping %d annotation(s) on missing page %d",
                                       len(page_annotations), page_idx)
                        continue

                    page = doc[page_idx]
                    for ann in page_annotations:
                        self._add_annotation_to_page(page, ann)

                self._composite_drawing(doc, drawing_image_path)

                doc.save(temp_path, garbage=4, deflate=True)
            finally:
                doc.close()

            os.replace(temp_path, output_path)

        except Exception as e:
            logger.exception("Failed to export draft %s", draft_id)
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise ExportFailure(f"Export failed: {e}") from e

        logger.info("Exported draft %s to %s", draft_id, output_path)
        return str(output_path)

    @staticmethod
    def _load_annotations(annotations_json: Optional[str]) -> List[Annotation]:
        if not annotations_json or not annotations_json.strip():
            return []

        try:
            data = json.loads(annotations_json)
        except ValueError:
            logger.warning("Annotations JSON is malformed; exporting without annotations")
            return []

        if not isinstance(data, list):
            logger.warning("Annotations JSON is not a list; exporting without annotations")
            return []

        annotations = []
        for item in data:
            try:
                annotations.append(annotation_from_dict(item))
            except ValueError as e:
                logger.warning("Skipping annotation: %s", e)
        return annotations

    @staticmethod
    def _fill_form(doc: fitz.Document, form_data: Any) -> None:
        """Write form values into the matching widgets."""
        if not isinstance(form_data, dict) or not form_data:
            return

        for page in doc:
            for widget in page.widgets():
                name = widget.field_name
                if name not in form_data:
                    continue

                value = form_data[name]
                if widget.field_type == fitz.PDF_WIDGET_TYPE_CHECKBOX:
                    on = value is True or str(value).strip().lower() in _TRUTHY \
                        or str(value) == str(widget.on_state())
                    widget.field_value = widget.on_state() if on else "Off"
                elif widget.field_type == fitz.PDF_WIDGET_TYPE_RADIOBUTTON:
                    on = value is True or str(value) == str(widget.on_state())
                    widget.field_value = widget.on_state() if on else "Off"
                elif widget.field_type == fitz.PDF_WIDGET_TYPE_LISTBOX and isinstance(value, list):
                    widget.field_value = [str(v) for v in value]
                else:
                    widget.field_value = "" if value is None else str(value)
                widget.update()

    @staticmethod
    def _add_annotation_to_page(page: fitz.Page, annotation: Annotation) -> None:
        """Draw a single annotation as page content."""
        # PyMuPDF page space is top-left based, like a viewport at scale 1
        viewport = Viewport(scale=1.0, page_height_pt=page.rect.height,
                            page_width_pt=page.rect.width)
        color = hex_to_rgb(annotation.color)

        if annotation.annotation_type == AnnotationType.INK:
            shape = page.new_shape()
            drawn = False
            for stroke in annotation.strokes:
                if len(stroke) < 2:
                    continue
                points = [fitz.Point(*pdf_to_viewport(x, y, viewport)) for x, y in stroke]
                shape.draw_polyline(points)
                drawn = True

            if drawn:
                shape.finish(color=color, width=annotation.thickness_pt,
                             lineCap=1, lineJoin=1, closePath=False)
                shape.commit()

        elif annotation.annotation_type == AnnotationType.TEXT:
            left, top = pdf_to_viewport(annotation.x_pt, annotation.y_pt, viewport)
            # insert_text positions the baseline
            baseline = fitz.Point(left, top + annotation.font_size_pt)
            page.insert_text(baseline, annotation.text,
                             fontsize=annotation.font_size_pt, color=color)

        else:
            raise TypeError(f"Unsupported annotation type: {annotation.annotation_type}")

    @staticmethod
    def _composite_drawing(doc: fitz.Document, drawing_image_path: Optional[str]) -> None:
        """Lay the drawing PNG over the whole first page."""
        if not drawing_image_path:
            return
        if not os.path.isfile(drawing_image_path):
            logger.warning("Drawing image %s is missing; exporting without it", drawing_image_path)
            return
        if len(doc) == 0:
            return

        page = doc[0]
        page.insert_image(page.rect, filename=drawing_image_path,
                          overlay=True, keep_proportion=False)
