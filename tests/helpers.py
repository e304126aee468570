"""
Test helpers: in-memory PDFs, request payloads, and readers for the
annotation dictionaries written into exported PDFs.
"""

import re

import fitz  # PyMuPDF

from annotation_export.models import PrimitiveAnnotation

TEST_FONT_NAME = "TestSans"


def make_pdf(pages: int = 1, with_note: bool = False) -> bytes:
    """Blank A4 PDF, optionally with one pre-existing text annotation on page 1."""
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page(width=595, height=842)
    if with_note:
        doc[0].add_text_annot((50, 50), "existing comment")
    data = doc.tobytes()
    doc.close()
    return data


def read_annotations(pdf_bytes: bytes, page_index: int = 0) -> list:
    """
    Return the annotation dictionaries of one page as {key: value} dicts,
    plus an "xref" entry. Pages are never loaded, so no appearance streams
    get synthesized while reading.
    """
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        kind, value = doc.xref_get_key(doc.page_xref(page_index), "Annots")
        if kind != "array":
            return []
        annotations = []
        for num in re.findall(r"(\d+)\s+0\s+R", value):
            xref = int(num)
            entry = {"xref": xref}
            for key in doc.xref_get_keys(xref):
                entry[key] = doc.xref_get_key(xref, key)[1]
            annotations.append(entry)
        return annotations
    finally:
        doc.close()


def numbers(value: str) -> list:
    """Parse a PDF number array such as "[100 180 150 200]"."""
    return [float(v) for v in value.strip("[]").split()]


def make_record(**kwargs) -> PrimitiveAnnotation:
    values = dict(
        id="a1",
        page=1,
        author="Alice",
        content="Looks good",
        timestamp="2024-05-01T10:20:30.000Z",
        x=100.0,
        y=200.0,
        width=50.0,
        height=20.0,
        selected_text="",
        type="highlight",
    )
    values.update(kwargs)
    return PrimitiveAnnotation(**values)


def annotation_payload(id="a1", page_index=0, type="highlight", role="manual-annotator",
                       x=100, y=200, width=50, height=20, replies=None, content="Check this",
                       selected_text=None):
    """JSON form of one viewer annotation."""
    payload = {
        "id": id,
        "pageIndex": page_index,
        "content": content,
        "type": type,
        "author": {"name": "Alice", "role": role},
        "timestamp": "2024-05-01T10:20:30.000Z",
        "coordinates": {"pdfCoordinates": {"x": x, "y": y, "width": width, "height": height}},
        "replies": replies or [],
    }
    if selected_text is not None:
        payload["aiAnnotation"] = {"selectedText": selected_text}
    return payload


def reply_payload(id="r1", content="Agreed", role="peer", name="Bob"):
    return {
        "id": id,
        "author": {"name": name, "role": role, "color": "#3366ff"},
        "content": content,
        "timestamp": "2024-05-02T08:00:00.000Z",
    }


