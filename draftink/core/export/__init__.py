"""
Export pipeline: flatten drafts into final PDFs.
"""
from .pdf_exporter import PDFExporter, hex_to_rgb

__all__ = ['PDFExporter', 'hex_to_rgb']
