"""Data Model

Immutable records passed between the locator, rasterizer and layout engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from .config import PRIMARY_LABEL, SECONDARY_LABEL, DEFAULT_RASTER_SCALE


class Role(Enum):
    """Originator of a message block."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def label(self) -> str:
        """Label drawn above (or in front of) the block's content."""
        return PRIMARY_LABEL if self is Role.PRIMARY else SECONDARY_LABEL


@dataclass(frozen=True)
class StructuralNode:
    """Structural attributes of one document element.

    Attributes:
        tag: Lower-case tag name (e.g., 'div')
        classes: Class names on the element
        attributes: All other attributes, values as strings
        style: Parsed inline style declarations (lower-case property names)
        text: Trimmed text content
        ancestors: Enclosing elements, nearest first
    """

    tag: str
    classes: frozenset = frozenset()
    attributes: Mapping[str, str] = field(default_factory=dict)
    style: Mapping[str, str] = field(default_factory=dict)
    text: str = ""
    ancestors: Tuple["StructuralNode", ...] = ()

    def self_and_ancestors(self):
        """Yield this node, then each ancestor from nearest to root."""
        yield self
        yield from self.ancestors


@dataclass(frozen=True)
class TextSegment:
    """A run of block text. Formula runs hold their rendered form."""

    text: str
    is_formula: bool = False
    source: Optional[str] = None


@dataclass(frozen=True)
class ContentBlock:
    """One paginatable unit: a chat message.

    Attributes:
        raw_text: Full trimmed text content
        pixel_width: Measured width in CSS pixels
        pixel_height: Measured height in CSS pixels
        visible: False when display/visibility hints hide the element
        role: Originator classification
        node: Structural record the block was built from
        segments: Text runs to draw; formula runs are rendered before rasterization
        index: Position in document order
    """

    raw_text: str
    pixel_width: int
    pixel_height: int
    visible: bool = True
    role: Role = Role.SECONDARY
    node: Optional[StructuralNode] = None
    segments: Tuple[TextSegment, ...] = ()
    index: int = 0

    @property
    def is_eligible(self) -> bool:
        """True if the block is visible, non-empty and has positive pixel size."""
        return (
            self.visible
            and bool(self.raw_text)
            and self.pixel_width > 0
            and self.pixel_height > 0
        )

    @property
    def display_segments(self) -> Tuple[TextSegment, ...]:
        """Segments to draw, falling back to the raw text as a single run."""
        return self.segments or (TextSegment(self.raw_text),)


@dataclass
class RasterImage:
    """Pixel buffer for one block.

    Attributes:
        pixels: Pillow image holding the device pixels
        width: Width in device pixels
        height: Height in device pixels
        scale: Device pixels per CSS pixel
    """

    pixels: Any
    width: int
    height: int
    scale: float = DEFAULT_RASTER_SCALE

    @classmethod
    def from_pil(cls, image, scale: float = DEFAULT_RASTER_SCALE) -> "RasterImage":
        width, height = image.size
        return cls(pixels=image, width=width, height=height, scale=scale)
