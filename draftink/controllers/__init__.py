"""
Controllers connecting the annotation core to the Qt editor.
"""
from .annotation_controller import AnnotationController

__all__ = ['AnnotationController']
