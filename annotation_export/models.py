"""
Annotation data model.

FrontendAnnotation / AnnotationReply mirror the JSON the viewer posts to the
export endpoint. PrimitiveAnnotation is the flat record the PDF writer works
from: one per top-level annotation and one per reply.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .errors import AnnotationValidationError

AI_ASSISTANT = "AI-assistant"
MANUAL_ANNOTATOR = "manual-annotator"
MENTOR = "mentor"
PEER = "peer"

# Labels sent by the localized viewer
ROLE_ALIASES = {
    "AI助手": AI_ASSISTANT,
    "手动批注者": MANUAL_ANNOTATOR,
    "导师": MENTOR,
    "同学": PEER,
}

HIGHLIGHT = "highlight"
NOTE = "note"
STRIKEOUT = "strikeout"

# Replies are drawn as a standard note icon
REPLY_ICON_SIZE = 24


@dataclass
class Author:
    name: str
    role: str

    @property
    def is_ai(self) -> bool:
        return self.role == AI_ASSISTANT


@dataclass
class PdfRect:
    """Rectangle in PDF page space (origin bottom-left)."""
    x: float
    y: float
    width: float
    height: float


@dataclass
class AnnotationReply:
    id: str
    author: Author
    content: str
    timestamp: str


@dataclass
class FrontendAnnotation:
    id: str
    page_index: int  # 0-indexed
    content: str
    type: str
    author: Author
    timestamp: str
    rect: PdfRect  # coordinates.pdfCoordinates as captured
    selected_text: str = ""
    replies: List[AnnotationReply] = field(default_factory=list)


@dataclass
class PrimitiveAnnotation:
    """One annotation object to be written into the PDF."""
    id: str
    page: int  # 1-indexed
    author: str
    content: str
    timestamp: str
    x: float
    y: float
    width: float
    height: float
    selected_text: str
    type: str
    is_reply: bool = False
    in_reply_to: Optional[str] = None


def normalize_role(role: str) -> str:
    """Map localized role labels onto their canonical names."""
    return ROLE_ALIASES.get(role, role)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    A trailing "Z" is accepted; timestamps without an offset are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("timestamp must be a non-empty ISO-8601 string")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise AnnotationValidationError(f"{where} must be an object")
    if key not in data or data[key] is None:
        raise AnnotationValidationError(f"{where}: missing '{key}'")
    return data[key]


def _string(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise AnnotationValidationError(f"{where} must be a string")
    return value


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnnotationValidationError(f"{where} must be a number")
    if not math.isfinite(value):
        raise AnnotationValidationError(f"{where} must be a finite number")
    return float(value)


def _timestamp(value: Any, where: str) -> str:
    try:
        parse_timestamp(value)
    except (TypeError, ValueError):
        raise AnnotationValidationError(f"{where} is not an ISO-8601 timestamp: {value!r}")
    return value


def _author(data: Any, where: str) -> Author:
    name = _string(_require(data, "name", where), f"{where}.name")
    role = _string(data.get("role") or "", f"{where}.role")
    return Author(name=name, role=normalize_role(role))


def reply_from_dict(data: Dict[str, Any], where: str = "reply") -> AnnotationReply:
    return AnnotationReply(
        id=str(_require(data, "id", where)),
        author=_author(_require(data, "author", where), f"{where}.author"),
        content=_string(data.get("content") or "", f"{where}.content"),
        timestamp=_timestamp(_require(data, "timestamp", where), f"{where}.timestamp"),
    )


def annotation_from_dict(data: Dict[str, Any], where: str = "annotation") -> FrontendAnnotation:
    """Build a FrontendAnnotation from its JSON form, raising AnnotationValidationError on bad input."""
    page_index = _require(data, "pageIndex", where)
    if isinstance(page_index, bool) or not isinstance(page_index, int) or page_index < 0:
        raise AnnotationValidationError(f"{where}.pageIndex must be a non-negative integer")

    coordinates = _require(data, "coordinates", where)
    pdf_coords = _require(coordinates, "pdfCoordinates", f"{where}.coordinates")
    rect = PdfRect(*(
        _number(_require(pdf_coords, key, f"{where}.pdfCoordinates"), f"{where}.pdfCoordinates.{key}")
        for key in ("x", "y", "width", "height")
    ))

    selected_text = ""
    ai_annotation = data.get("aiAnnotation")
    if isinstance(ai_annotation, dict):
        selected_text = ai_annotation.get("selectedText") or ""

    replies = data.get("replies") or []
    if not isinstance(replies, list):
        raise AnnotationValidationError(f"{where}.replies must be a list")

    return FrontendAnnotation(
        id=str(_require(data, "id", where)),
        page_index=page_index,
        content=_string(data.get("content") or "", f"{where}.content"),
        type=_string(_require(data, "type", where), f"{where}.type"),
        author=_author(_require(data, "author", where), f"{where}.author"),
        timestamp=_timestamp(_require(data, "timestamp", where), f"{where}.timestamp"),
        rect=rect,
        selected_text=_string(selected_text, f"{where}.aiAnnotation.selectedText"),
        replies=[reply_from_dict(r, f"{where}.replies[{i}]") for i, r in enumerate(replies)],
    )


def parse_export_request(data: Any) -> Tuple[str, List[FrontendAnnotation]]:
    """
    Validate the export request body.

    Returns:
        Tuple of (filename, annotations)
    """
    if not isinstance(data, dict):
        raise AnnotationValidationError("Request body must be a JSON object")

    filename = data.get("filename")
    annotations = data.get("annotations")
    if not filename or annotations is None:
        raise AnnotationValidationError("Missing filename or annotations")
    if not isinstance(filename, str):
        raise AnnotationValidationError("filename must be a string")
    if not isinstance(annotations, list):
        raise AnnotationValidationError("annotations must be a list")

    return filename, [
        annotation_from_dict(item, f"annotations[{i}]") for i, item in enumerate(annotations)
    ]
