"""Text Flow Module

Greedy word wrapping against an external width measurement.
"""
from typing import Callable, List

from reportlab.pdfbase import pdfmetrics

from .unit_converter import points_to_mm

MeasureFunc = Callable[[str], float]


def reportlab_measure(font_name: str, font_size: float) -> MeasureFunc:
    """
    Build a measurement function from ReportLab font metrics.

    Args:
        font_name: Registered font name (e.g., 'Helvetica')
        font_size: Font size in points

    Returns:
        Function mapping a string to its rendered width in millimetres
    """
    def measure(text: str) -> float:
        return points_to_mm(pdfmetrics.stringWidth(text, font_name, font_size))
    return measure


def wrap_paragraph(paragraph: str, max_width: float, measure: MeasureFunc) -> List[str]:
    """Wrap a single paragraph (no newlines). Returns [''] for a blank paragraph."""
    words = paragraph.split()
    if not words:
        return [""]

    lines = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            # A word wider than max_width still gets a line of its own
            current = word
    lines.append(current)
    return lines


def wrap(text: str, max_width: float, measure: MeasureFunc) -> List[str]:
    """
    Split text into lines no wider than max_width.

    Words accumulate on a line while the measured width stays within
    max_width. Explicit newlines start a new line. There is no hyphenation.

    Args:
        text: Text to wrap
        max_width: Maximum line width, in the units returned by measure
        measure: Width of a candidate line

    Returns:
        Lines in reading order (empty list for empty text)
    """
    if not text or not text.strip():
        return []

    lines = []
    for paragraph in text.strip().split("\n"):
        lines.extend(wrap_paragraph(paragraph, max_width, measure))
    return lines
