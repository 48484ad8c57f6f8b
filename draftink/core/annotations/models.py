"""
Annotation data model.

Annotations are immutable records. Every coordinate they hold is in PDF
points; viewport pixels never reach this module.
"""
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

Point = Tuple[float, float]
Stroke = Tuple[Point, ...]

PLACEHOLDER_TEXT = "Double click to edit"
DEFAULT_COLOR = "#000000"
DEFAULT_FONT_SIZE_PT = 12.0
DEFAULT_TEXT_WIDTH_PT = 150.0
DEFAULT_TEXT_HEIGHT_PT = 20.0
DEFAULT_THICKNESS_PT = 2.0


class AnnotationType(Enum):
    TEXT = "text"
    INK = "ink"


def new_annotation_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TextAnnotation:
    """A typed text box anchored at its top-left corner."""
    page_index: int  # 0-based page index
    x_pt: float
    y_pt: float
    text: str = PLACEHOLDER_TEXT
    font_size_pt: float = DEFAULT_FONT_SIZE_PT
    width_pt: float = DEFAULT_TEXT_WIDTH_PT
    height_pt: float = DEFAULT_TEXT_HEIGHT_PT
    color: str = DEFAULT_COLOR
    id: str = field(default_factory=new_annotation_id)

    annotation_type = AnnotationType.TEXT

    def with_changes(self, **changes) -> "TextAnnotation":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.annotation_type.value,
            'pageIndex': self.page_index,
            'xPt': self.x_pt,
            'yPt': self.y_pt,
            'text': self.text,
            'fontSizePt': self.font_size_pt,
            'widthPt': self.width_pt,
            'heightPt': self.height_pt,
            'color': self.color,
        }


@dataclass(frozen=True)
class InkAnnotation:
    """Freehand strokes; each stroke is an ordered run of points."""
    page_index: int
    strokes: Tuple[Stroke, ...]
    color: str = DEFAULT_COLOR
    thickness_pt: float = DEFAULT_THICKNESS_PT
    x_pt: float = 0.0
    y_pt: float = 0.0
    id: str = field(default_factory=new_annotation_id)

    annotation_type = AnnotationType.INK

    def __post_init__(self):
        # Freeze nested sequences so snapshots never share mutable storage
        frozen = tuple(
            tuple((float(x), float(y)) for x, y in stroke)
            for stroke in self.strokes
        )
        object.__setattr__(self, 'strokes', frozen)

    def with_changes(self, **changes) -> "InkAnnotation":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.annotation_type.value,
            'pageIndex': self.page_index,
            'xPt': self.x_pt,
            'yPt': self.y_pt,
            'strokes': [
                [{'x': x, 'y': y} for x, y in stroke] for stroke in self.strokes
            ],
            'color': self.color,
            'thicknessPt': self.thickness_pt,
        }


Annotation = Union[TextAnnotation, InkAnnotation]


def _require(data: Dict[str, Any], *keys: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise ValueError(f"Annotation is missing required field(s): {', '.join(missing)}")


def _parse_point(point: Any) -> Point:
    """Accept a point as {"x": .., "y": ..} or as an [x, y] pair."""
    if isinstance(point, dict):
        _require(point, 'x', 'y')
        return point['x'], point['y']
    if isinstance(point, (list, tuple)) and len(point) == 2:
        return point[0], point[1]
    raise ValueError(f"Ink point must be an object or an [x, y] pair, got {point!r}")


def annotation_from_dict(data: Dict[str, Any]) -> Annotation:
    """
    Create an annotation from its JSON form.

    Only the structure is checked: required keys must be present and the
    type must be known. Values are not cross-validated.

    Raises:
        ValueError: If the structure is not a text or ink annotation
    """
    if not isinstance(data, dict):
        raise ValueError("Annotation must be an object")
    _require(data, 'type', 'pageIndex')

    kind = data['type']
    if kind == AnnotationType.TEXT.value:
        _require(data, 'xPt', 'yPt')
        return TextAnnotation(
            id=data.get('id') or new_annotation_id(),
            page_index=data['pageIndex'],
            x_pt=data['xPt'],
            y_pt=data['yPt'],
            text=data.get('text', PLACEHOLDER_TEXT),
            font_size_pt=data.get('fontSizePt', DEFAULT_FONT_SIZE_PT),
            width_pt=data.get('widthPt', DEFAULT_TEXT_WIDTH_PT),
            height_pt=data.get('heightPt', DEFAULT_TEXT_HEIGHT_PT),
            color=data.get('color', DEFAULT_COLOR),
        )

    if kind == AnnotationType.INK.value:
        _require(data, 'strokes')
        if not isinstance(data['strokes'], (list, tuple)):
            raise ValueError("Ink strokes must be a list")
        strokes = []
        for stroke in data['strokes']:
            if not isinstance(stroke, (list, tuple)):
                raise ValueError("Ink stroke must be a list of points")
            strokes.append([_parse_point(point) for point in stroke])
        try:
            return InkAnnotation(
                id=data.get('id') or new_annotation_id(),
                page_index=data['pageIndex'],
                strokes=strokes,
                color=data.get('color', DEFAULT_COLOR),
                thickness_pt=data.get('thicknessPt', DEFAULT_THICKNESS_PT),
                x_pt=data.get('xPt', 0.0),
                y_pt=data.get('yPt', 0.0),
            )
        except TypeError as e:
            raise ValueError(f"Ink point coordinates must be numbers: {e}") from e

    raise ValueError(f"Unknown annotation type: {kind!r}")


class AnnotationCollection:
    """
    Immutable, ordered collection of annotations.

    Every modifying operation returns a new collection, so a collection held
    by the history stack can never change underneath it.
    """

    __slots__ = ('_items',)

    def __init__(self, annotations: Iterable[Annotation] = ()):
        self._items: Tuple[Annotation, ...] = tuple(annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Annotation:
        return self._items[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, AnnotationCollection):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"AnnotationCollection({list(self._items)!r})"

    def get(self, annotation_id: str) -> Optional[Annotation]:
        for ann in self._items:
            if ann.id == annotation_id:
                return ann
        return None

    def __contains__(self, annotation_id: str) -> bool:
        return self.get(annotation_id) is not None

    def for_page(self, page_index: int) -> List[Annotation]:
        """Get all annotations on a 0-based page."""
        return [ann for ann in self._items if ann.page_index == page_index]

    def add(self, annotation: Annotation) -> "AnnotationCollection":
        return AnnotationCollection(self._items + (annotation,))

    def replace(self, annotation: Annotation) -> "AnnotationCollection":
        """Swap in a new version of the annotation with the same id."""
        return AnnotationCollection(
            annotation if ann.id == annotation.id else ann for ann in self._items
        )

    def update(self, annotation_id: str, **changes) -> "AnnotationCollection":
        """
        Apply a partial update to one annotation.

        Args:
            annotation_id: Id of the annotation to change
            **changes: Field values to replace

        Returns:
            A new collection; unchanged copy if the id is unknown
        """
        return AnnotationCollection(
            ann.with_changes(**changes) if ann.id == annotation_id else ann
            for ann in self._items
        )

    def remove(self, annotation_id: str) -> "AnnotationCollection":
        return AnnotationCollection(ann for ann in self._items if ann.id != annotation_id)

    def to_list(self) -> List[Dict[str, Any]]:
        return [ann.to_dict() for ann in self._items]

    @classmethod
    def from_list(cls, data: Iterable[Dict[str, Any]]) -> "AnnotationCollection":
        return cls(annotation_from_dict(item) for item in data)

