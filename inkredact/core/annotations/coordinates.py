"""
Conversion between screen (canvas pixel) space and document space.

Screen coordinates are pixels of the page rendered at ``render_scale`` with
the origin at the top-left and y growing downward. Document coordinates are
PDF points with the origin at the bottom-left and y growing upward.
"""
from typing import Tuple

from .errors import InvalidScale


def _check_scale(render_scale: float) -> None:
    if not render_scale > 0:
        raise InvalidScale(render_scale)


def to_document_space(screen_x: float, screen_y: float, render_scale: float,
                      page_height: float) -> Tuple[float, float]:
    """
    Convert a screen point to document space.

    Args:
        screen_x: X coordinate in screen pixels
        screen_y: Y coordinate in screen pixels, measured from the top
        render_scale: Zoom factor the page was rendered at
        page_height: Height of the page in document units (scale 1)

    Returns:
        Tuple of (doc_x, doc_y)

    Raises:
        InvalidScale: If render_scale is not positive
    """
    _check_scale(render_scale)
    return screen_x / render_scale, page_height - screen_y / render_scale


def to_screen_space(doc_x: float, doc_y: float, render_scale: float,
                    page_height: float) -> Tuple[float, float]:
    """Inverse of :func:`to_document_space`."""
    _check_scale(render_scale)
    return doc_x * render_scale, (page_height - doc_y) * render_scale


def rect_to_document_space(left: float, top: float, width: float, height: float,
                           render_scale: float,
                           page_height: float) -> Tuple[float, float, float, float]:
    """
    Convert a screen rectangle given by its top-left corner and size.

    Returns:
        Tuple of (x, y, width, height) where (x, y) is the bottom-left corner
        in document space
    """
    # The bottom edge on screen becomes the lower y in document space
    x, y = to_document_space(left, top + height, render_scale, page_height)
    return x, y, width / render_scale, height / render_scale


def rect_to_screen_space(x: float, y: float, width: float, height: float,
                         render_scale: float,
                         page_height: float) -> Tuple[float, float, float, float]:
    """Inverse of :func:`rect_to_document_space`; returns (left, top, width, height)."""
    left, top = to_screen_space(x, y + height, render_scale, page_height)
    return left, top, width * render_scale, height * render_scale


def normalize_drag(x0: float, y0: float, x1: float,
                   y1: float) -> Tuple[float, float, float, float]:
    """Turn two drag corners, in any order, into (left, top, width, height)."""
    return min(x0, x1), min(y0, y1), abs(x1 - x0), abs(y1 - y0)


class PageViewport:
    """Coordinate conversions bound to one rendered page."""

    def __init__(self, render_scale: float, page_height: float):
        _check_scale(render_scale)
        self.render_scale = render_scale
        self.page_height = page_height

    def to_document(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        return to_document_space(screen_x, screen_y, self.render_scale, self.page_height)

    def to_screen(self, doc_x: float, doc_y: float) -> Tuple[float, float]:
        return to_screen_space(doc_x, doc_y, self.render_scale, self.page_height)

    def rect_to_document(self, left: float, top: float, width: float,
                         height: float) -> Tuple[float, float, float, float]:
        return rect_to_document_space(left, top, width, height,
                                      self.render_scale, self.page_height)

    def rect_to_screen(self, x: float, y: float, width: float,
                       height: float) -> Tuple[float, float, float, float]:
        return rect_to_screen_space(x, y, width, height,
                                    self.render_scale, self.page_height)

    def __repr__(self) -> str:
        return f"PageViewport(scale={self.render_scale}, page_height={self.page_height})"
