"""
Utility functions and helpers.
"""
from .config import StoragePaths, get_app_data_dir
from .files import atomic_write_bytes, atomic_write_text
from .logging_setup import configure_logging

__all__ = [
    # Configuration
    'StoragePaths',
    'get_app_data_dir',

    # Files
    'atomic_write_bytes',
    'atomic_write_text',

    # Logging
    'configure_logging',
]
