"""Page Layout Engine

Flows classified chat blocks down fixed-size pages: a label, then the
block's content (image slices or wrapped text lines), then a gap. The engine
owns the page cursor and decides every page break; drawing goes through a
PageWriter.

Page numbering is a separate finalize() pass because "Page i of N" needs the
total page count, which is only known once all content is placed.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from ..config import (
    DEFAULT_PAGE_WIDTH_MM,
    DEFAULT_PAGE_HEIGHT_MM,
    DEFAULT_MARGIN_MM,
    DEFAULT_LABEL_HEIGHT_MM,
    DEFAULT_INTER_BLOCK_GAP_MM,
    DEFAULT_MIN_SLICE_HEIGHT_MM,
    DEFAULT_TITLE_OFFSET_MM,
    DEFAULT_TEXT_LINE_HEIGHT_MM,
    DEFAULT_TEXT_BLOCK_GAP_MM,
    DEFAULT_FOOTER_OFFSET_MM,
    FOOTER_FONT_SIZE,
    FOOTER_GRAY,
    LABEL_FONT_SIZE,
    TEXT_FONT_SIZE,
    TITLE_FONT_SIZE,
)
from ..exceptions import InvalidConfigurationError, LayoutFinalizedError, RenderingError
from ..models import ContentBlock, RasterImage
from .image_splitter import ImageSplitter, PAGE_BREAK, fit_to_width
from .text_flow import MeasureFunc, wrap
from .unit_converter import pixels_to_mm

# Tolerance for cursor comparisons against page edges
CURSOR_EPSILON_MM = 1e-6


@dataclass(frozen=True)
class LayoutGeometry:
    """Page and spacing configuration, all in millimetres."""

    page_width: float = DEFAULT_PAGE_WIDTH_MM
    page_height: float = DEFAULT_PAGE_HEIGHT_MM
    margin: float = DEFAULT_MARGIN_MM
    label_height: float = DEFAULT_LABEL_HEIGHT_MM
    inter_block_gap: float = DEFAULT_INTER_BLOCK_GAP_MM
    min_slice_height: float = DEFAULT_MIN_SLICE_HEIGHT_MM
    title_offset: float = DEFAULT_TITLE_OFFSET_MM
    text_line_height: float = DEFAULT_TEXT_LINE_HEIGHT_MM
    text_block_gap: float = DEFAULT_TEXT_BLOCK_GAP_MM
    footer_offset: float = DEFAULT_FOOTER_OFFSET_MM

    def __post_init__(self):
        if self.page_width <= 0 or self.page_height <= 0:
            raise InvalidConfigurationError(
                f"Page size must be positive, got {self.page_width}x{self.page_height} mm"
            )
        if self.margin < 0 or 2 * self.margin >= min(self.page_width, self.page_height):
            raise InvalidConfigurationError(
                f"Margin {self.margin} mm leaves no content area on a "
                f"{self.page_width}x{self.page_height} mm page"
            )
        if self.text_line_height <= 0 or self.text_line_height > self.usable_height:
            raise InvalidConfigurationError(
                f"Text line height must be within the usable page height, got {self.text_line_height} mm"
            )

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        """Lowest y the cursor may reach on any page."""
        return self.page_height - self.margin


@dataclass
class PageCursor:
    """Current write position: page number and distance from the page's top edge."""

    current_page: int = 1
    y_position: float = 0.0


class LayoutState(Enum):
    IDLE = "idle"
    PLACING_LABEL = "placing_label"
    PLACING_CONTENT = "placing_content"
    PAGE_BREAK = "page_break"
    DONE = "done"


class PageLayoutEngine:
    """Lays out chat blocks across pages.

    Attributes:
        writer: PageWriter receiving drawing calls
        geometry: Page and spacing configuration
        splitter: Image splitter sized to the content width
        cursor: Current write position
        state: Current LayoutState
        diagnostics: Messages for blocks skipped after a failure
        cursor_history: y position after every placement, per page
    """

    def __init__(self, writer, geometry: Optional[LayoutGeometry] = None,
                 splitter: Optional[ImageSplitter] = None, export_state=None):
        """
        Args:
            writer: PageWriter (or any object with the same primitives)
            geometry: Layout configuration (A4 defaults if None)
            splitter: Image splitter (one sized to geometry.content_width if None)
            export_state: Optional ExportState receiving per-block progress
        """
        self.writer = writer
        self.geometry = geometry or LayoutGeometry()
        self.splitter = splitter or ImageSplitter(self.geometry.content_width)
        self.export_state = export_state
        self.cursor = PageCursor(current_page=1, y_position=self.geometry.margin)
        self.state = LayoutState.IDLE
        self.diagnostics: List[str] = []
        self.cursor_history: List[tuple] = []
        self.blocks_placed = 0

    # ------------------------------------------------------------------
    # Cursor and page handling
    # ------------------------------------------------------------------

    def start(self, title: Optional[str] = None):
        """Write the document title on page 1 and move the cursor below it."""
        self._ensure_open()
        g = self.geometry
        if title:
            self.writer.set_font(TITLE_FONT_SIZE, bold=True)
            self.writer.draw_text(title, g.margin, g.margin)
        self.cursor.y_position = g.margin + g.title_offset

    def page_break(self):
        """Open a new page and reset the cursor to the top margin."""
        previous = self.state
        self.state = LayoutState.PAGE_BREAK
        self.writer.add_page()
        self.cursor.current_page = self.writer.page_count()
        self.cursor.y_position = self.geometry.margin
        self.state = previous

    def _placed(self):
        """Record the cursor after a placement; y must stay within the margins."""
        g = self.geometry
        y = self.cursor.y_position
        if not (g.margin - CURSOR_EPSILON_MM <= y <= g.bottom_limit + CURSOR_EPSILON_MM):
            raise RenderingError(
                f"Cursor left the content area on page {self.cursor.current_page}: y={y:.3f} mm"
            )
        self.cursor_history.append((self.cursor.current_page, y))

    def _ensure_open(self):
        if self.state is LayoutState.DONE:
            raise LayoutFinalizedError("Layout already finalized")

    # ------------------------------------------------------------------
    # Image-backed blocks
    # ------------------------------------------------------------------

    def block_size_mm(self, block: ContentBlock):
        """Physical (width, height) of a block after fitting it to the content width."""
        return fit_to_width(
            pixels_to_mm(block.pixel_width),
            pixels_to_mm(block.pixel_height),
            self.geometry.content_width,
        )

    def place_image_block(self, block: ContentBlock, image: RasterImage):
        """
        Place one block as a label followed by image slices.

        All slices are computed before anything is drawn, so a splitting
        failure leaves the document untouched.

        Args:
            block: Eligible, classified block
            image: Its rasterization

        Raises:
            ImageSplitError: If the image cannot be split
        """
        self._ensure_open()
        g = self.geometry
        width_mm, height_mm = self.block_size_mm(block)

        # Keep the label together with at least the start of its content
        needs_break = (
            self.cursor.y_position + g.label_height + min(height_mm, g.min_slice_height)
            > g.bottom_limit + CURSOR_EPSILON_MM
        )
        label_y = g.margin if needs_break else self.cursor.y_position
        content_top = label_y + g.label_height

        events = list(self.splitter.split(
            image,
            width_mm,
            height_mm,
            first_available=g.bottom_limit - content_top,
            page_usable_height=g.usable_height,
        ))

        if needs_break:
            self.page_break()

        self.state = LayoutState.PLACING_LABEL
        self.writer.set_font(LABEL_FONT_SIZE, bold=True)
        self.writer.draw_text(block.role.label, g.margin, self.cursor.y_position)
        self.cursor.y_position += g.label_height
        self._placed()

        self.state = LayoutState.PLACING_CONTENT
        for event in events:
            if event is PAGE_BREAK:
                self.page_break()
                continue
            self.writer.draw_image(
                event.image, g.margin, self.cursor.y_position, event.width_mm, event.height_mm
            )
            self.cursor.y_position += event.height_mm
            self._placed()

        self.cursor.y_position += g.inter_block_gap
        self.blocks_placed += 1

    async def layout_images(self, blocks: Sequence[ContentBlock],
                            rasterize: Callable[[ContentBlock], Awaitable[RasterImage]]) -> int:
        """
        Rasterize and place blocks one at a time, in order.

        A block whose rasterization or splitting fails is skipped with a
        diagnostic; the remaining blocks are still laid out.

        Args:
            blocks: Eligible blocks in document order
            rasterize: Coroutine function producing a block's image

        Returns:
            Number of blocks placed
        """
        self._ensure_open()
        placed_before = self.blocks_placed
        total = len(blocks)
        for position, block in enumerate(blocks, start=1):
            try:
                image = await rasterize(block)
                self.place_image_block(block, image)
            except Exception as e:
                self._skip(block, e)
            self._report(position, total)
        return self.blocks_placed - placed_before

    # ------------------------------------------------------------------
    # Text-backed blocks
    # ------------------------------------------------------------------

    def place_text_block(self, block: ContentBlock, measure: MeasureFunc):
        """
        Place one block as wrapped text lines with the label in front.

        Each line is checked against the bottom margin before it is drawn.

        Args:
            block: Eligible, classified block
            measure: Width of a string in millimetres at the text font
        """
        self._ensure_open()
        g = self.geometry
        lines = wrap(f"{block.role.label} {block.raw_text}", g.content_width, measure)

        self.state = LayoutState.PLACING_CONTENT
        for line in lines:
            if self.cursor.y_position + g.text_line_height > g.bottom_limit + CURSOR_EPSILON_MM:
                self.page_break()
            self.writer.draw_text(line, g.margin, self.cursor.y_position)
            self.cursor.y_position += g.text_line_height
            self._placed()

        self.cursor.y_position += g.text_block_gap
        self.blocks_placed += 1

    def layout_text(self, blocks: Sequence[ContentBlock], measure: MeasureFunc) -> int:
        """
        Place blocks as plain text, in order.

        Args:
            blocks: Eligible blocks in document order
            measure: Width of a string in millimetres at TEXT_FONT_SIZE

        Returns:
            Number of blocks placed
        """
        self._ensure_open()
        placed_before = self.blocks_placed
        self.writer.set_font(TEXT_FONT_SIZE, bold=False)
        total = len(blocks)
        for position, block in enumerate(blocks, start=1):
            try:
                self.place_text_block(block, measure)
            except Exception as e:
                self._skip(block, e)
            self._report(position, total)
        return self.blocks_placed - placed_before

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self) -> int:
        """
        Stamp "Page i of N" centered at the bottom of every page.

        Returns:
            Total page count
        """
        self._ensure_open()
        g = self.geometry
        total = self.writer.page_count()
        for number in range(1, total + 1):
            self.writer.select_page(number)
            self.writer.set_font(FOOTER_FONT_SIZE, bold=False)
            self.writer.set_text_color(FOOTER_GRAY)
            self.writer.draw_text(
                f"Page {number} of {total}",
                g.page_width / 2,
                g.page_height - g.footer_offset,
                align="center",
            )
        self.state = LayoutState.DONE
        return total

    def _skip(self, block: ContentBlock, error: Exception):
        message = f"Failed to render block {block.index}: {error}"
        print(f"Warning: {message}")
        self.diagnostics.append(message)

    def _report(self, position: int, total: int):
        if self.export_state is not None and total:
            self.export_state.update_layout_progress(position, total)
