"""Export Options Dataclass

Configuration options for a chat export.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .config import DEFAULT_DOCUMENT_NAME, DEFAULT_RENDER_WIDTH_PX
from .paginator.layout_engine import LayoutGeometry
from .utils import clean_filename


@dataclass
class ExportOptions:
    """Configuration options for exporting a saved chat page to PDF.

    Attributes:
        html_path: Path to the saved chat page (.html)
        render_formulas: True for the image export with rendered math;
                         False for the plain-text export

        # Output Options
        document_name: Base of the output filename (defaults to "chat-history")
        output_dir: Directory for the output PDF
        export_date: Date stamp for the filename (today if None)

        # Layout Options
        geometry: Page size, margins and spacing
        render_width_px: Width blocks are laid out at before rasterization

        # Internal State (populated by caller)
        original_filename: Uploaded filename, used when document_name is not set
    """

    # Required
    html_path: str
    render_formulas: bool = True

    # Output Options
    document_name: Optional[str] = None
    output_dir: str = "."
    export_date: Optional[date] = None

    # Layout Options
    geometry: LayoutGeometry = field(default_factory=LayoutGeometry)
    render_width_px: int = DEFAULT_RENDER_WIDTH_PX

    # Internal State
    original_filename: Optional[str] = None

    def __post_init__(self):
        """Validate configuration options after initialization."""
        if self.document_name is not None and not self.document_name.strip():
            raise ValueError("document_name cannot be empty")

        if self.render_width_px <= 0:
            raise ValueError(
                f"render_width_px must be positive, got {self.render_width_px}"
            )

    @property
    def resolved_document_name(self) -> str:
        """Filename base: document_name, else the cleaned upload name, else the default."""
        if self.document_name:
            return clean_filename(self.document_name)
        if self.original_filename:
            return clean_filename(self.original_filename)
        return DEFAULT_DOCUMENT_NAME

    @property
    def text_mode(self) -> bool:
        return not self.render_formulas
