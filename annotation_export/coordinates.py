"""
Coordinate mapping from captured annotation rectangles to drawn rectangles.
"""

from .models import Author, PdfRect


def map_to_page_rect(rect: PdfRect, author: Author) -> PdfRect:
    """
    Return the rectangle to draw for a top-level annotation.

    Rectangles produced by the AI assistant are anchored at their top edge,
    so they are shifted down by their own height. Everything else is used
    as captured. Replies never pass through here.
    """
    if author.is_ai:
        return PdfRect(rect.x, rect.y - rect.height, rect.width, rect.height)
    return PdfRect(rect.x, rect.y, rect.width, rect.height)
