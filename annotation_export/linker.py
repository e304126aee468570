"""
Register annotation objects for one page and thread replies onto their parents.

A reply's dictionary embeds an indirect reference (/IRT) to its parent, so all
top-level annotations on the page are registered first (pass 1) and replies
are resolved against the resulting id -> xref table afterwards (pass 2).
Replies whose parent is not on the page are dropped.
"""

import logging
import re
from typing import Dict, List, Sequence

import fitz  # PyMuPDF

from .models import PrimitiveAnnotation
from .pdf_objects import build_annotation_object

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"(\d+)\s+(\d+)\s+R")


def existing_annotation_refs(doc: fitz.Document, page: fitz.Page) -> List[str]:
    """
    Return the page's current /Annots entries as "n g R" strings.

    Handles a direct array, an indirect array, or no array at all.
    """
    kind, value = doc.xref_get_key(page.xref, "Annots")
    if kind == "xref":
        value = doc.xref_object(int(value.split()[0]), compressed=True)
    elif kind != "array":
        return []
    return [f"{num} {gen} R" for num, gen in _REFERENCE.findall(value)]


def register_object(doc: fitz.Document, source: str) -> int:
    """Add a new indirect object to the document and return its xref."""
    xref = doc.get_new_xref()
    doc.update_object(xref, source)
    return xref


def link_page_annotations(doc: fitz.Document, page: fitz.Page,
                          records: Sequence[PrimitiveAnnotation], log=None) -> int:
    """
    Write the records of one page into its /Annots array.

    Args:
        doc: Loaded document (mutated in place)
        page: Target page
        records: Records whose page number is this page
        log: Optional request-scoped logger

    Returns:
        Number of annotation objects written
    """
    log = log or logger
    annots = existing_annotation_refs(doc, page)
    handles: Dict[str, int] = {}
    written = 0

    # Pass 1: top-level annotations
    for record in records:
        if record.is_reply:
            continue
        source = build_annotation_object(record, page.xref)
        if source is None:
            continue
        xref = register_object(doc, source)
        handles[record.id] = xref
        annots.append(f"{xref} 0 R")
        written += 1

    # Pass 2: replies, linked to the parents registered above
    for record in records:
        if not record.is_reply:
            continue
        parent_xref = handles.get(record.in_reply_to) if record.in_reply_to else None
        if parent_xref is None:
            log.warning("[linker] Dropping reply %s: parent %s not found on page %d",
                        record.id, record.in_reply_to, record.page)
            continue
        source = build_annotation_object(record, page.xref, parent_xref)
        if source is None:
            continue
        xref = register_object(doc, source)
        annots.append(f"{xref} 0 R")
        written += 1

    doc.xref_set_key(page.xref, "Annots", "[" + " ".join(annots) + "]")
    return written
