"""Export Result Dataclass

Result outputs from the export pipeline.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ExportResult:
    """Result from one export.

    Attributes:
        status: "completed", "rejected" or "failed"
        status_message: Human-readable status message

        # Output
        output_pdf_path: Path to the written PDF (None unless completed)
        page_count: Pages in the written PDF
        blocks_placed: Blocks laid out

        # Diagnostics
        diagnostics: Non-fatal notices (skipped blocks, failed formulas)
        error: Error message if the export failed (None otherwise)
    """

    # Status
    status: str  # "completed", "rejected", "failed"
    status_message: str

    # Output
    output_pdf_path: Optional[str] = None
    page_count: int = 0
    blocks_placed: int = 0

    # Diagnostics
    diagnostics: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True if the PDF was written."""
        return self.status == "completed" and self.output_pdf_path is not None

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    @property
    def is_rejected(self) -> bool:
        """True if the export was refused because another one was running."""
        return self.status == "rejected"

    def to_gradio_outputs(self) -> tuple:
        """Convert to Gradio UI outputs format.

        Returns:
            Tuple of (output_file, status_text, diagnostics_text)
        """
        import gradio as gr

        diagnostics_text = "\n".join(self.diagnostics)

        if not self.is_complete:
            return (
                gr.update(value=None, visible=False),  # output_file
                self.status_message,
                diagnostics_text,
            )

        return (
            gr.update(value=self.output_pdf_path, visible=True),
            self.status_message,
            diagnostics_text,
        )
