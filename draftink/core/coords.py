"""
Mapping between PDF user space and viewport pixel space.

PDF user space has its origin at the bottom-left corner of the page with y
growing upward, measured in points. Viewport space has its origin at the
top-left corner with y growing downward, scaled by the zoom factor. Pages are
assumed to be unrotated.
"""
from dataclasses import dataclass
from typing import Iterable, List, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class Viewport:
    """Geometry of one rendered page."""
    scale: float
    page_height_pt: float
    page_width_pt: float = 0.0

    @property
    def width_px(self) -> float:
        return self.page_width_pt * self.scale

    @property
    def height_px(self) -> float:
        return self.page_height_pt * self.scale


def pdf_to_viewport(x_pt: float, y_pt: float, viewport: Viewport) -> Point:
    """
    Convert a point in PDF user space to viewport pixels.

    Args:
        x_pt: X coordinate in points
        y_pt: Y coordinate in points (origin bottom-left)
        viewport: Page geometry

    Returns:
        (x_px, y_px) with origin top-left
    """
    x_px = x_pt * viewport.scale
    y_px = (viewport.page_height_pt - y_pt) * viewport.scale
    return x_px, y_px


def viewport_to_pdf(x_px: float, y_px: float, viewport: Viewport) -> Point:
    """
    Convert a viewport pixel position to PDF user space.

    Exact inverse of pdf_to_viewport. Positions outside the page are
    accepted and simply land outside the page box.
    """
    x_pt = x_px / viewport.scale
    y_pt = viewport.page_height_pt - y_px / viewport.scale
    return x_pt, y_pt


def points_to_pdf(points: Iterable[Point], viewport: Viewport) -> List[Point]:
    """Convert a sequence of viewport points to PDF points."""
    return [viewport_to_pdf(x, y, viewport) for x, y in points]


def points_to_viewport(points: Iterable[Point], viewport: Viewport) -> List[Point]:
    """Convert a sequence of PDF points to viewport points."""
    return [pdf_to_viewport(x, y, viewport) for x, y in points]
