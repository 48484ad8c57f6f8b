"""
Server-side draft store.
"""
from draftink.core.errors import DraftError, ExportFailure, NotFoundError, ValidationError
from .models import (
    UNSET,
    Draft,
    DraftDetail,
    DraftPatch,
    DraftSummary,
    ExportResult,
    Template,
)
from .repository import DraftRepository
from .service import DraftService
from .templates import TemplateStore

__all__ = [
    'DraftError',
    'ExportFailure',
    'NotFoundError',
    'ValidationError',
    'UNSET',
    'Draft',
    'DraftDetail',
    'DraftPatch',
    'DraftSummary',
    'ExportResult',
    'Template',
    'DraftRepository',
    'DraftService',
    'TemplateStore',
]
