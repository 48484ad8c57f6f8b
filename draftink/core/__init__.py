"""
Core logic for Draftink: annotations, drafts and export.
"""
