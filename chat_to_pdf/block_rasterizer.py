"""Block Rasterizer Module

Lays out a message block's text at a fixed CSS width and draws it with
Pillow at a device-pixel scale. Measuring (CSS pixels) and drawing (device
pixels) share one line layout, so the raster always matches the measured
size.
"""
import asyncio
import re
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import (
    DEFAULT_RENDER_WIDTH_PX,
    DEFAULT_RASTER_SCALE,
    DEFAULT_RASTER_FONT_SIZE_PX,
    DEFAULT_RASTER_LINE_HEIGHT_PX,
    DEFAULT_RASTER_PADDING_PX,
    PRIMARY_BACKGROUND,
    SECONDARY_BACKGROUND,
    TEXT_COLOR,
    FORMULA_COLOR,
)
from .exceptions import BlockRasterizationError
from .models import ContentBlock, RasterImage, Role, StructuralNode, TextSegment

# A laid-out line is a list of (fragment, is_formula) runs
Line = List[Tuple[str, bool]]

_PX_LENGTH = re.compile(r"^(\d+(?:\.\d+)?)(px)?$")


def _style_px(value: Optional[str]) -> Optional[float]:
    """Inline CSS length in pixels, or None for anything but a plain px/unitless value."""
    if not value:
        return None
    match = _PX_LENGTH.match(value.strip())
    return float(match.group(1)) if match else None


class BlockRasterizer:
    """Measures and rasterizes message blocks.

    Attributes:
        render_width_px: Width blocks are laid out at, in CSS pixels
        scale: Device pixels per CSS pixel
        font_size_px / line_height_px / padding_px: Text metrics in CSS pixels
    """

    def __init__(
        self,
        render_width_px: int = DEFAULT_RENDER_WIDTH_PX,
        scale: int = DEFAULT_RASTER_SCALE,
        font_size_px: int = DEFAULT_RASTER_FONT_SIZE_PX,
        line_height_px: int = DEFAULT_RASTER_LINE_HEIGHT_PX,
        padding_px: int = DEFAULT_RASTER_PADDING_PX,
        font_path: Optional[str] = None,
        mono_font_path: Optional[str] = None,
    ):
        self.render_width_px = render_width_px
        self.scale = scale
        self.font_size_px = font_size_px
        self.line_height_px = line_height_px
        self.padding_px = padding_px
        self.font_path = font_path
        self.mono_font_path = mono_font_path
        self._fonts = {}

    def _font(self, mono: bool, scale: int):
        key = (mono, scale)
        if key not in self._fonts:
            path = self.mono_font_path if mono else self.font_path
            size = self.font_size_px * scale
            if path:
                self._fonts[key] = ImageFont.truetype(path, size)
            else:
                self._fonts[key] = ImageFont.load_default(size=size)
        return self._fonts[key]

    def _tokens(self, segments: Sequence[TextSegment]):
        """Yield (word, is_formula) tokens; None marks a forced line break."""
        for segment in segments:
            if segment.is_formula:
                yield segment.text, True
                continue
            paragraphs = segment.text.split("\n")
            for position, paragraph in enumerate(paragraphs):
                if position > 0:
                    yield None
                for word in paragraph.split():
                    yield word, False

    def layout(self, segments: Sequence[TextSegment], width_px: Optional[float] = None) -> List[Line]:
        """
        Greedy word wrap of segments at CSS scale.

        Args:
            segments: Text runs of the block
            width_px: Block width in CSS pixels (render_width_px if None)

        Returns:
            Lines of (fragment, is_formula) runs
        """
        available = (width_px or self.render_width_px) - 2 * self.padding_px
        space = self._font(False, 1).getlength(" ")
        lines: List[Line] = []
        current: Line = []
        current_width = 0.0

        for token in self._tokens(segments):
            if token is None:
                if current:
                    lines.append(current)
                current, current_width = [], 0.0
                continue
            word, is_formula = token
            word_width = self._font(is_formula, 1).getlength(word)
            needed = word_width if not current else current_width + space + word_width
            if current and needed > available:
                lines.append(current)
                current, current_width = [(word, is_formula)], word_width
            else:
                current.append((word, is_formula))
                current_width = needed
        if current:
            lines.append(current)
        return lines

    def measure(self, node: StructuralNode, segments: Sequence[TextSegment]) -> Tuple[int, int]:
        """
        On-screen size of a block in CSS pixels.

        Hidden elements and elements whose inline style sets a zero width or
        height measure (0, 0), as they would in a browser.

        Args:
            node: Structural record of the block
            segments: Text runs (after formula rendering)

        Returns:
            Tuple of (width, height)
        """
        style = node.style
        if style.get("display") == "none":
            return 0, 0

        width = _style_px(style.get("width"))
        height = _style_px(style.get("height"))
        if width == 0 or height == 0:
            return 0, 0

        width = width or self.render_width_px
        lines = self.layout(segments, width)
        if not lines:
            return int(width), 0
        content_height = 2 * self.padding_px + len(lines) * self.line_height_px
        return int(width), int(height or content_height)

    def draw(self, block: ContentBlock) -> Image.Image:
        """Draw a block at device scale. Synchronous; see rasterize()."""
        scale = self.scale
        size = (block.pixel_width * scale, block.pixel_height * scale)
        background = PRIMARY_BACKGROUND if block.role is Role.PRIMARY else SECONDARY_BACKGROUND
        image = Image.new("RGB", size, background)
        draw = ImageDraw.Draw(image)

        space = self._font(False, scale).getlength(" ")
        lines = self.layout(block.display_segments, block.pixel_width)
        for row, line in enumerate(lines):
            x = self.padding_px * scale
            y = (self.padding_px + row * self.line_height_px) * scale
            for fragment, is_formula in line:
                font = self._font(is_formula, scale)
                draw.text((x, y), fragment, font=font,
                          fill=FORMULA_COLOR if is_formula else TEXT_COLOR)
                x += font.getlength(fragment) + space
        return image

    async def rasterize(self, block: ContentBlock) -> RasterImage:
        """
        Rasterize a block off the event loop.

        Args:
            block: Eligible block

        Returns:
            RasterImage at self.scale device pixels per CSS pixel

        Raises:
            BlockRasterizationError: If drawing fails
        """
        if block.pixel_width <= 0 or block.pixel_height <= 0:
            raise BlockRasterizationError(block.index, "block has zero size")
        try:
            image = await asyncio.to_thread(self.draw, block)
        except Exception as e:
            raise BlockRasterizationError(block.index, str(e)) from e
        return RasterImage.from_pil(image, scale=self.scale)
