"""Paginator Package

This package provides the pagination core for chat exports:

Core Classes:
- PageLayoutEngine: Flows labelled blocks down pages and numbers them
- LayoutGeometry: Page size, margins and spacing
- ImageSplitter: Cuts block images into page-sized slices
- FontManager: Font registration and Unicode support

Helper Functions:
- classify / is_visible / filter_eligible: Block classification
- wrap: Greedy word wrap against a width measurement

Utilities:
- unit_converter: Pixel, millimetre and point conversions
"""

from .layout_engine import PageLayoutEngine, LayoutGeometry, LayoutState, PageCursor
from .image_splitter import ImageSplitter, ImageSlice, PAGE_BREAK, fit_to_width
from .block_classifier import classify, is_visible, is_eligible, filter_eligible
from .text_flow import wrap, reportlab_measure
from .font_manager import FontManager
from . import unit_converter

# Expose public API
__all__ = [
    # Layout engine
    'PageLayoutEngine',
    'LayoutGeometry',
    'LayoutState',
    'PageCursor',

    # Image splitting
    'ImageSplitter',
    'ImageSlice',
    'PAGE_BREAK',
    'fit_to_width',

    # Classification
    'classify',
    'is_visible',
    'is_eligible',
    'filter_eligible',

    # Text flow
    'wrap',
    'reportlab_measure',

    # Fonts
    'FontManager',

    # Utilities module
    'unit_converter',
]
