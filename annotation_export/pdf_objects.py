"""
PDF annotation dictionaries for highlight, note and strikeout records.

Each builder returns the source of one annotation dictionary, ready to be
registered with ``doc.update_object``. Coordinates are PDF page space
(origin bottom-left), so no page transformation is applied here.
"""

import logging
from typing import Callable, Dict, List, Optional
from xml.sax.saxutils import escape

import fitz  # PyMuPDF

from .models import HIGHLIGHT, NOTE, REPLY_ICON_SIZE, STRIKEOUT, PrimitiveAnnotation, parse_timestamp

logger = logging.getLogger(__name__)

# Annotation colors (RGB, 0-1 range)
YELLOW = (1, 1, 0)
AMBER = (1, 0.8, 0)
RED = (1, 0, 0)

HIGHLIGHT_OPACITY = 0.5
NOTE_ICON_SIZE = REPLY_ICON_SIZE

# Print flag: visible and printed, never hidden
PRINT_FLAG = 4

RICH_TEXT_TEMPLATE = (
    '<?xml version="1.0"?>'
    '<body xmlns="http://www.w3.org/1999/xhtml" '
    'xmlns:xfa="http://www.xfa.org/schema/xfa-data/1.0/">'
    '<p>{}</p></body>'
)


def pdf_number(value: float) -> str:
    """Format a number as a PDF real without exponent notation."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def pdf_array(values) -> str:
    return "[" + " ".join(pdf_number(v) for v in values) + "]"


def pdf_date(timestamp: str) -> str:
    """ISO-8601 timestamp -> PDF date string D:YYYYMMDDHHMMSSZ (UTC, seconds)."""
    return "D:" + parse_timestamp(timestamp).strftime("%Y%m%d%H%M%S") + "Z"


def rich_text(content: str) -> str:
    """Wrap content in the XHTML body readers show in the comment popup."""
    body = escape(content or "").replace("\r\n", "\n").replace("\n", "<br/>")
    return RICH_TEXT_TEMPLATE.format(body)


def _rect(record: PrimitiveAnnotation) -> List[float]:
    return [record.x, record.y, record.x + record.width, record.y + record.height]


def _quad_points(record: PrimitiveAnnotation) -> List[float]:
    # Upper-left, upper-right, lower-left, lower-right
    top = record.y + record.height
    right = record.x + record.width
    return [record.x, top, right, top, record.x, record.y, right, record.y]


def _common_entries(record: PrimitiveAnnotation, subtype: str, rect: List[float],
                    subject: str, page_xref: int) -> List[str]:
    return [
        "/Type /Annot",
        f"/Subtype /{subtype}",
        f"/Rect {pdf_array(rect)}",
        f"/Contents {fitz.get_pdf_str(record.content or '')}",
        f"/T {fitz.get_pdf_str(record.author or '')}",
        f"/M {fitz.get_pdf_str(pdf_date(record.timestamp))}",
        f"/RC {fitz.get_pdf_str(rich_text(record.content))}",
        f"/Subj {fitz.get_pdf_str(subject)}",
        f"/F {PRINT_FLAG}",
        f"/P {page_xref} 0 R",
    ]


def _highlight(record: PrimitiveAnnotation, page_xref: int, parent_xref: Optional[int]) -> List[str]:
    entries = _common_entries(record, "Highlight", _rect(record), "highlight", page_xref)
    entries += [
        f"/C {pdf_array(YELLOW)}",
        f"/CA {pdf_number(HIGHLIGHT_OPACITY)}",
        f"/QuadPoints {pdf_array(_quad_points(record))}",
    ]
    return entries


def _note(record: PrimitiveAnnotation, page_xref: int, parent_xref: Optional[int]) -> List[str]:
    # Icon footprint is fixed regardless of the record's width/height
    rect = [record.x, record.y, record.x + NOTE_ICON_SIZE, record.y + NOTE_ICON_SIZE]
    subject = "reply" if record.is_reply else "note"
    icon = "Comment" if record.is_reply else "Note"

    entries = _common_entries(record, "Text", rect, subject, page_xref)
    entries += [
        f"/Name /{icon}",
        "/Open false",
        f"/C {pdf_array(AMBER)}",
    ]
    if record.is_reply and parent_xref is not None:
        entries += [
            f"/IRT {parent_xref} 0 R",
            "/RT /R",
        ]
    return entries


def _strikeout(record: PrimitiveAnnotation, page_xref: int, parent_xref: Optional[int]) -> List[str]:
    entries = _common_entries(record, "StrikeOut", _rect(record), "strikeout", page_xref)
    entries += [
        f"/C {pdf_array(RED)}",
        f"/QuadPoints {pdf_array(_quad_points(record))}",
    ]
    return entries


BUILDERS: Dict[str, Callable[[PrimitiveAnnotation, int, Optional[int]], List[str]]] = {
    HIGHLIGHT: _highlight,
    NOTE: _note,
    STRIKEOUT: _strikeout,
}


def build_annotation_object(record: PrimitiveAnnotation, page_xref: int,
                            parent_xref: Optional[int] = None) -> Optional[str]:
    """
    Build the annotation dictionary for one record.

    Args:
        record: Flattened annotation record
        page_xref: xref of the page the annotation belongs to (/P)
        parent_xref: xref of the resolved parent annotation, replies only (/IRT)

    Returns:
        PDF dictionary source, or None for an unsupported annotation type
    """
    builder = BUILDERS.get(record.type)
    if builder is None:
        logger.warning("[pdf_objects] Skipping annotation %s with unsupported type %r",
                       record.id, record.type)
        return None
    return "<<" + " ".join(builder(record, page_xref, parent_xref)) + ">>"
