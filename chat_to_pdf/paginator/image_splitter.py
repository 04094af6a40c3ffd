"""Image Splitter Module

Cuts a rasterized block into horizontal bands that each fit the vertical
space offered on a page.

The splitter is a generator so the layout engine can interleave page breaks
with drawing: it yields PAGE_BREAK whenever the space left on the current page is
used up and height remains, then continues with a full page.
"""
from dataclasses import dataclass
from typing import Any, Iterator, Tuple, Union

from ..exceptions import ImageSplitError
from ..models import RasterImage

# Heights below this are float residue, not content.
HEIGHT_EPSILON_MM = 1e-6


class _PageBreakSignal:
    def __repr__(self):
        return "PAGE_BREAK"


PAGE_BREAK = _PageBreakSignal()


@dataclass(frozen=True)
class ImageSlice:
    """One horizontal band of a block image.

    Attributes:
        image: Pillow image of the band (full source width)
        width_mm: Drawn width
        height_mm: Drawn height
        pixel_top: First source row of the band
        pixel_height: Number of source rows the band covers
    """

    image: Any
    width_mm: float
    height_mm: float
    pixel_top: int
    pixel_height: int


SplitEvent = Union[ImageSlice, _PageBreakSignal]


def fit_to_width(width_mm: float, height_mm: float, content_width: float) -> Tuple[float, float]:
    """
    Scale a block down uniformly when it is wider than the content area.

    Args:
        width_mm: Physical width of the block
        height_mm: Physical height of the block
        content_width: Available width between the margins

    Returns:
        Tuple of (width, height), aspect ratio preserved

    Examples:
        >>> fit_to_width(300.0, 60.0, 150.0)
        (150.0, 30.0)
        >>> fit_to_width(100.0, 60.0, 150.0)
        (100.0, 60.0)
    """
    if width_mm > content_width:
        scale_factor = content_width / width_mm
        return content_width, height_mm * scale_factor
    return width_mm, height_mm


class ImageSplitter:
    """Splits block images across pages.

    Pixel bands are cut from the unscaled source buffer: a slice covering a
    fraction f of the drawn height covers the same fraction f of the source
    rows, so width scaling never changes which rows land on which page.
    Band boundaries are rounded from the cumulative height, which keeps the
    row counts summing to the source height exactly.
    """

    def __init__(self, content_width: float):
        """
        Args:
            content_width: Width between the page margins, in mm
        """
        self.content_width = content_width

    def split(
        self,
        image: RasterImage,
        width_mm: float,
        height_mm: float,
        first_available: float,
        page_usable_height: float,
    ) -> Iterator[SplitEvent]:
        """
        Yield page breaks and slices covering the whole block.

        Args:
            image: Rasterized block
            width_mm: Physical width of the block
            height_mm: Physical height of the block
            first_available: Space left on the current page for the first slice
            page_usable_height: Space on a fresh page (page height minus both margins)

        Yields:
            PAGE_BREAK or ImageSlice, in drawing order

        Raises:
            ImageSplitError: If the image or geometry cannot be split
        """
        if image is None or image.pixels is None or image.width <= 0 or image.height <= 0:
            raise ImageSplitError("Cannot split an empty image")
        if width_mm <= 0 or height_mm <= 0:
            raise ImageSplitError(
                f"Block must have positive physical size, got {width_mm:.2f}x{height_mm:.2f} mm"
            )
        if page_usable_height <= HEIGHT_EPSILON_MM:
            raise ImageSplitError(
                f"Page has no usable height ({page_usable_height:.2f} mm)"
            )

        width_mm, height_mm = fit_to_width(width_mm, height_mm, self.content_width)

        remaining = height_mm
        consumed = 0.0
        available = first_available
        pixel_cursor = 0

        while remaining > HEIGHT_EPSILON_MM:
            if available <= HEIGHT_EPSILON_MM:
                yield PAGE_BREAK
                available = page_usable_height
                continue

            slice_height = min(available, remaining)
            consumed += slice_height
            remaining -= slice_height
            available -= slice_height

            if remaining <= HEIGHT_EPSILON_MM:
                # Last band: absorb float residue and end on the last source row
                slice_height += remaining
                remaining = 0.0
                pixel_bottom = image.height
            else:
                pixel_bottom = round(consumed / height_mm * image.height)
                pixel_bottom = min(max(pixel_bottom, pixel_cursor), image.height)

            yield ImageSlice(
                image=self._crop_band(image, pixel_cursor, pixel_bottom),
                width_mm=width_mm,
                height_mm=slice_height,
                pixel_top=pixel_cursor,
                pixel_height=pixel_bottom - pixel_cursor,
            )
            pixel_cursor = pixel_bottom

    @staticmethod
    def _crop_band(image: RasterImage, top: int, bottom: int):
        """Extract rows [top, bottom) at full width; never returns an empty band."""
        if bottom <= top:
            # Sub-pixel slice: draw one row so the page writer gets a real image
            top = min(top, image.height - 1)
            bottom = top + 1
        return image.pixels.crop((0, top, image.width, bottom))
