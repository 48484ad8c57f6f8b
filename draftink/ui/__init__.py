"""
Qt widgets of the draft editor.
"""
from .annotation_layer import AnnotationLayer

__all__ = ['AnnotationLayer']
