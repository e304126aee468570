"""
Export Pipeline

1. Resolve the stored source PDF and download it
2. Flatten annotations and their replies into primitive records
3. Write the records into the PDF and serialize it
"""

from typing import List, Tuple

from . import do_spaces
from .assembler import assemble
from .flattener import flatten_annotations
from .fonts import FontAsset
from .models import FrontendAnnotation


def fetch_source_pdf(filename: str, log) -> bytes:
    """Storage lookup followed by a download of the object's URL."""
    log.info("Resolving source PDF: %s", filename)
    url = do_spaces.head_document(filename)
    return do_spaces.fetch_document(url)


def export_annotated_pdf(filename: str, annotations: List[FrontendAnnotation],
                         font: FontAsset, log) -> Tuple[bytes, int]:
    """
    Produce the annotated PDF for one export request.

    Args:
        filename: Storage key of the source PDF
        annotations: Parsed top-level annotations
        font: Font embedded into annotated pages
        log: Request-scoped logger

    Returns:
        Tuple of (PDF bytes, number of annotation objects written)
    """
    source_bytes = fetch_source_pdf(filename, log)
    log.info("Source PDF loaded: %.2f KB", len(source_bytes) / 1024)

    records = flatten_annotations(annotations)
    log.info("Flattened %d annotations into %d records", len(annotations), len(records))

    return assemble(source_bytes, records, font, title=filename, log=log)
