"""Unit Conversion Utilities

Pure functions for converting between the measurement systems used when
paginating rasterized chat blocks:

- CSS pixels: screen measurements at a fixed pixel density (96 DPI)
- Millimetres: the page writer's unit, origin at top-left
- Points: ReportLab's unit (1/72 inch), origin at bottom-left

All functions are pure (no side effects) and can be tested in isolation.
"""

from ..config import CSS_DPI, MM_PER_INCH, POINTS_PER_INCH


def pixels_to_mm(pixels: float, dpi: float = CSS_DPI) -> float:
    """
    Convert a pixel measurement to millimetres.

    Args:
        pixels: Measurement in pixels
        dpi: Dots per inch (96 for CSS pixels)

    Returns:
        Measurement in millimetres

    Examples:
        >>> pixels_to_mm(96)
        25.4
        >>> pixels_to_mm(300, dpi=300)
        25.4
    """
    return pixels / dpi * MM_PER_INCH


def mm_to_pixels(mm: float, dpi: float = CSS_DPI) -> float:
    """
    Convert millimetres to pixels.

    Args:
        mm: Measurement in millimetres
        dpi: Dots per inch (96 for CSS pixels)

    Returns:
        Measurement in pixels

    Examples:
        >>> mm_to_pixels(25.4)
        96.0
    """
    return mm / MM_PER_INCH * dpi


def mm_to_points(mm: float) -> float:
    """Convert millimetres to points (1 point = 1/72 inch)."""
    return mm / MM_PER_INCH * POINTS_PER_INCH


def points_to_mm(points: float) -> float:
    """Convert points to millimetres."""
    return points / POINTS_PER_INCH * MM_PER_INCH


def flip_y(y: float, page_height: float) -> float:
    """
    Flip a Y coordinate between top-left and bottom-left origin systems.

    Args:
        y: Y coordinate in source system
        page_height: Height of the page (in same units as y)

    Returns:
        Y coordinate in flipped system

    Notes:
        This function is its own inverse:
        flip_y(flip_y(y, h), h) == y
    """
    return page_height - y
