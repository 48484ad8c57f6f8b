"""
Draftink - fill, annotate, version and flatten PDF form drafts.
"""
__version__ = "0.1.0"
