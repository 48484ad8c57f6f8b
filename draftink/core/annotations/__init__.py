"""
Annotation system for PDF drafts.
"""
from .models import (
    PLACEHOLDER_TEXT,
    Annotation,
    AnnotationCollection,
    AnnotationType,
    InkAnnotation,
    TextAnnotation,
    annotation_from_dict,
)
from .history import HistoryStack
from .interaction import AnnotationInteraction, EditMode, StyleContext

__all__ = [
    'PLACEHOLDER_TEXT',
    'Annotation',
    'AnnotationCollection',
    'AnnotationType',
    'InkAnnotation',
    'TextAnnotation',
    'annotation_from_dict',
    'HistoryStack',
    'AnnotationInteraction',
    'EditMode',
    'StyleContext',
]
