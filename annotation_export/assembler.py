"""
Merge annotation records into a source PDF and serialize the result.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Sequence, Tuple

import fitz  # PyMuPDF

from .errors import DocumentLoadError
from .fonts import FontAsset
from .linker import link_page_annotations
from .models import PrimitiveAnnotation

logger = logging.getLogger(__name__)

PRODUCER = "PDF Annotation Exporter"
CREATOR = "PDF Annotation Export Service"
SUBJECT = "PDF document with user annotations"
KEYWORDS = "annotations, comments, PDF"


def load_document(source_bytes: bytes) -> fitz.Document:
    """Open PDF bytes, raising DocumentLoadError if they are not a usable PDF."""
    if not source_bytes:
        raise DocumentLoadError("Source document is empty")
    try:
        doc = fitz.open(stream=source_bytes, filetype="pdf")
        page_count = doc.page_count
    except Exception as e:
        raise DocumentLoadError(f"Failed to load PDF: {e}") from e

    if page_count == 0:
        doc.close()
        raise DocumentLoadError("Source document has no pages")
    return doc


def group_by_page(records: Sequence[PrimitiveAnnotation]) -> Dict[int, List[PrimitiveAnnotation]]:
    """Partition records by 1-based page number, keeping their relative order."""
    pages: Dict[int, List[PrimitiveAnnotation]] = OrderedDict()
    for record in records:
        pages.setdefault(record.page, []).append(record)
    return pages


def set_export_metadata(doc: fitz.Document, title: str):
    now = fitz.get_pdf_now()
    author = (doc.metadata or {}).get('author') or ''
    doc.set_metadata({
        'author': author,
        'title': f"{title} - annotated",
        'subject': SUBJECT,
        'keywords': KEYWORDS,
        'producer': PRODUCER,
        'creator': CREATOR,
        'creationDate': now,
        'modDate': now,
    })


def assemble(source_bytes: bytes, records: Sequence[PrimitiveAnnotation], font: FontAsset,
             title: str = "document", log=None) -> Tuple[bytes, int]:
    """
    Write annotation records into the source PDF.

    Args:
        source_bytes: Original PDF
        records: Flattened annotation records
        font: Font embedded into every annotated page
        title: Name used for the document title metadata
        log: Optional request-scoped logger

    Returns:
        Tuple of (PDF bytes, number of annotation objects written)

    Raises:
        DocumentLoadError: source_bytes is not a parseable PDF
    """
    log = log or logger
    doc = load_document(source_bytes)
    try:
        written = 0
        for page_number, page_records in group_by_page(records).items():
            page_index = page_number - 1
            if page_index < 0 or page_index >= doc.page_count:
                log.warning("[assembler] Page %d out of range (%d pages), skipping %d annotations",
                            page_number, doc.page_count, len(page_records))
                continue

            page = doc[page_index]
            page.insert_font(fontname=font.name, fontbuffer=font.buffer)
            count = link_page_annotations(doc, page, page_records, log=log)
            log.info("[assembler] Page %d: %d annotation objects written", page_number, count)
            written += count

        set_export_metadata(doc, title)

        # Object streams stay off: several readers ignore annotations stored in them
        output = doc.tobytes(garbage=0, deflate=True, use_objstms=0)
    finally:
        doc.close()

    log.info("[assembler] Export complete: %d annotations, %.2f KB", written, len(output) / 1024)
    return output, written
