"""
HTTP interface of the draft store.
"""
from .app import USER_HEADER, create_app, drafts_api

__all__ = ['USER_HEADER', 'create_app', 'drafts_api']
