"""Page Writer Module

A page-oriented drawing surface in millimetres with a top-left origin.

Drawing calls are recorded against an indexed list of pages rather than
streamed to a ReportLab canvas, so any earlier page can be revisited
(select_page) once the total page count is known. save() replays the
recorded pages onto a canvas and writes the file in one step.
"""
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdfcanvas

from .config import DEFAULT_PAGE_WIDTH_MM, DEFAULT_PAGE_HEIGHT_MM
from .paginator.font_manager import FontManager
from .paginator.unit_converter import mm_to_points, flip_y


@dataclass
class PageOperation:
    """One recorded drawing call."""

    kind: str  # "font", "color", "text" or "image"
    args: Dict[str, Any]


@dataclass
class WriterPage:
    """A page and the operations drawn on it, in order."""

    number: int
    operations: List[PageOperation] = field(default_factory=list)

    def texts(self) -> List[str]:
        """Text strings drawn on this page."""
        return [op.args["text"] for op in self.operations if op.kind == "text"]

    def images(self) -> List[PageOperation]:
        """Image operations drawn on this page."""
        return [op for op in self.operations if op.kind == "image"]


class PageWriter:
    """Records pages and renders them to PDF with ReportLab.

    The writer starts with one blank page. Text y positions are baselines;
    image y positions are the top edge of the image.
    """

    def __init__(self, page_size: Tuple[float, float] = (DEFAULT_PAGE_WIDTH_MM, DEFAULT_PAGE_HEIGHT_MM),
                 font_manager: Optional[FontManager] = None):
        """
        Args:
            page_size: (width, height) in millimetres, A4 portrait by default
            font_manager: Source of registered font names (built-in faces if None)
        """
        self.page_width, self.page_height = page_size
        self.font_manager = font_manager or FontManager(register=False)
        self._font_size = 12.0
        self._bold = False
        self._gray = 0
        self._pages: List[WriterPage] = []
        self._current = 0
        self.add_page()

    @property
    def pages(self) -> List[WriterPage]:
        return list(self._pages)

    @property
    def current_page(self) -> int:
        """1-based number of the page receiving drawing calls."""
        return self._current + 1

    def add_page(self) -> int:
        """Append a page, make it current and return its 1-based number."""
        page = WriterPage(number=len(self._pages) + 1)
        # Font and colour carry over to new pages
        page.operations.append(self._font_op())
        page.operations.append(PageOperation("color", {"gray": self._gray}))
        self._pages.append(page)
        self._current = len(self._pages) - 1
        return page.number

    def page_count(self) -> int:
        return len(self._pages)

    def select_page(self, number: int):
        """
        Make an existing page current.

        Args:
            number: 1-based page number

        Raises:
            IndexError: If the page does not exist
        """
        if not 1 <= number <= len(self._pages):
            raise IndexError(f"Page {number} out of range (1-{len(self._pages)})")
        self._current = number - 1

    def set_font(self, size: float, bold: bool = False):
        self._font_size = size
        self._bold = bold
        self._record(self._font_op())

    def set_text_color(self, gray: int):
        """Set text colour as a grey level, 0 (black) to 255 (white)."""
        self._gray = gray
        self._record(PageOperation("color", {"gray": gray}))

    def draw_text(self, text: str, x: float, y: float, align: str = "left"):
        """Draw text with its baseline at y. align is 'left', 'center' or 'right'."""
        if align not in ("left", "center", "right"):
            raise ValueError(f"Unknown alignment: {align}")
        self._record(PageOperation("text", {"text": text, "x": x, "y": y, "align": align}))

    def draw_image(self, image, x: float, y: float, width: float, height: float):
        """Draw a Pillow image with its top-left corner at (x, y)."""
        self._record(PageOperation("image", {
            "image": image, "x": x, "y": y, "width": width, "height": height,
        }))

    def save(self, output_path: str) -> str:
        """
        Render every page and write the PDF.

        The file is written to a temporary path next to output_path and moved
        into place only once rendering succeeded, so a failed save never leaves
        a partial document behind.

        Args:
            output_path: Destination PDF path

        Returns:
            output_path
        """
        directory = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(suffix=".pdf", dir=directory)
        os.close(fd)

        try:
            pdf = pdfcanvas.Canvas(
                tmp_path,
                pagesize=(mm_to_points(self.page_width), mm_to_points(self.page_height)),
            )
            for page in self._pages:
                for operation in page.operations:
                    self._replay(pdf, operation)
                pdf.showPage()
            pdf.save()
            os.replace(tmp_path, output_path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        print(f"DEBUG: Saved {len(self._pages)} page(s) to {output_path}")
        return output_path

    def _font_op(self) -> PageOperation:
        return PageOperation("font", {"size": self._font_size, "bold": self._bold})

    def _record(self, operation: PageOperation):
        self._pages[self._current].operations.append(operation)

    def _replay(self, pdf, operation: PageOperation):
        """Draw one recorded operation, converting mm/top-left to points/bottom-left."""
        args = operation.args
        if operation.kind == "font":
            pdf.setFont(self.font_manager.get_font_name(bold=args["bold"]), args["size"])
        elif operation.kind == "color":
            pdf.setFillGray(args["gray"] / 255.0)
        elif operation.kind == "text":
            x = mm_to_points(args["x"])
            y = mm_to_points(flip_y(args["y"], self.page_height))
            if args["align"] == "center":
                pdf.drawCentredString(x, y, args["text"])
            elif args["align"] == "right":
                pdf.drawRightString(x, y, args["text"])
            else:
                pdf.drawString(x, y, args["text"])
        elif operation.kind == "image":
            bottom = flip_y(args["y"] + args["height"], self.page_height)
            pdf.drawImage(
                ImageReader(args["image"]),
                mm_to_points(args["x"]),
                mm_to_points(bottom),
                width=mm_to_points(args["width"]),
                height=mm_to_points(args["height"]),
            )
