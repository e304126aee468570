"""
Flatten threaded annotations into the primitive records the PDF writer consumes.
"""

import logging
from typing import Iterable, List

from .coordinates import map_to_page_rect
from .models import (
    NOTE,
    REPLY_ICON_SIZE,
    AnnotationReply,
    FrontendAnnotation,
    PrimitiveAnnotation,
)

logger = logging.getLogger(__name__)


def _primary_record(annotation: FrontendAnnotation) -> PrimitiveAnnotation:
    rect = map_to_page_rect(annotation.rect, annotation.author)
    return PrimitiveAnnotation(
        id=annotation.id,
        page=annotation.page_index + 1,
        author=annotation.author.name,
        content=annotation.content,
        timestamp=annotation.timestamp,
        x=rect.x,
        y=rect.y,
        width=rect.width,
        height=rect.height,
        selected_text=annotation.selected_text,
        type=annotation.type,
        is_reply=False,
    )


def _reply_record(parent: FrontendAnnotation, reply: AnnotationReply) -> PrimitiveAnnotation:
    # Anchored at the parent's top-right corner, using the captured
    # (unadjusted) rectangle.
    origin = parent.rect
    return PrimitiveAnnotation(
        id=reply.id,
        page=parent.page_index + 1,
        author=reply.author.name,
        content=reply.content,
        timestamp=reply.timestamp,
        x=origin.x + origin.width,
        y=origin.y + origin.height,
        width=REPLY_ICON_SIZE,
        height=REPLY_ICON_SIZE,
        selected_text="",
        type=NOTE,
        is_reply=True,
        in_reply_to=parent.id,
    )


def flatten_annotations(annotations: Iterable[FrontendAnnotation]) -> List[PrimitiveAnnotation]:
    """
    Expand top-level annotations and their replies into one ordered list.

    Each annotation is followed directly by its replies; input order is kept.
    """
    records = []
    for annotation in annotations:
        records.append(_primary_record(annotation))
        for reply in annotation.replies:
            records.append(_reply_record(annotation, reply))

    logger.debug("[flattener] %d records from %d annotations",
                 len(records), len(records) - sum(r.is_reply for r in records))
    return records
