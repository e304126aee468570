"""
Annotation export engine.

Turns the viewer's threaded annotations into native PDF annotation objects
(highlights, notes, strikeouts, and replies linked to their parents) merged
into the source document.
"""
from .assembler import assemble
from .errors import (
    AIServiceError,
    AnnotationExportError,
    AnnotationValidationError,
    DocumentLoadError,
    FontAssetError,
    StorageConfigError,
    StorageNotFoundError,
)
from .flattener import flatten_annotations
from .fonts import FontAsset, load_font_asset
from .models import parse_export_request
from .pipeline import export_annotated_pdf

__all__ = [
    'AIServiceError',
    'AnnotationExportError',
    'AnnotationValidationError',
    'DocumentLoadError',
    'FontAsset',
    'FontAssetError',
    'StorageConfigError',
    'StorageNotFoundError',
    'assemble',
    'export_annotated_pdf',
    'flatten_annotations',
    'load_font_asset',
    'parse_export_request',
]
