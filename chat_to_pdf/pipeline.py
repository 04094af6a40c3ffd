"""Chat Export Pipeline

Main orchestration logic for exporting a saved chat page to PDF.
"""
import os
from typing import Callable, List, Optional, Sequence, Tuple

from .block_rasterizer import BlockRasterizer
from .config import (
    PROGRESS_STEPS,
    MAX_FILE_SIZE_MB,
    IMAGE_MODE_TITLE,
    TEXT_MODE_TITLE,
    TEXT_FONT_SIZE,
    SUCCESS_NOTICE,
    TEXT_SUCCESS_NOTICE,
    BUSY_NOTICE,
    FAILURE_NOTICE,
)
from .content_locator import ContentLocator, collect_message_nodes, load_document, to_structural_node
from .exceptions import NoEligibleBlocksError, RendererUnavailableError, PipelineStepError
from .export_options import ExportOptions
from .export_result import ExportResult
from .export_state import ExportState, default_export_state
from .formula_renderer import FormulaRenderer
from .models import ContentBlock, TextSegment
from .page_writer import PageWriter
from .paginator.block_classifier import classify, filter_eligible, is_visible
from .paginator.font_manager import FontManager
from .paginator.layout_engine import PageLayoutEngine
from .paginator.text_flow import reportlab_measure
from .utils import validate_html_path, check_file_size_limit, build_output_filename


class ChatExportPipeline:
    """Chat export orchestrator.

    This class sequences one export:
    1. Guard - refuse to start while another export is running
    2. Validation - input file exists, is HTML and within the size limit
    3. Locate - find the chat container (fatal if missing)
    4. Collect - build, classify and filter message blocks (fatal if none remain)
    5. Formulas - render math spans (formula export only)
    6. Layout - rasterize and paginate blocks, or wrap them as text
    7. Finalize - stamp page numbers and save the PDF

    Nothing is written to disk unless every step succeeds.

    Attributes:
        state: Export lifecycle and in-progress guard
        locator: Chat container locator
        font_manager: Registered fonts for the page writer
        formula_renderer: Math span renderer
        rasterizer: Block rasterizer (built per export from the options if None)
    """

    def __init__(
        self,
        state: Optional[ExportState] = None,
        locator: Optional[ContentLocator] = None,
        font_manager: Optional[FontManager] = None,
        formula_renderer: Optional[FormulaRenderer] = None,
        rasterizer: Optional[BlockRasterizer] = None,
        progress_callback: Optional[Callable[[float, str], None]] = None,
    ):
        """Initialize pipeline with its collaborators.

        Args:
            state: Shared export state (the process-wide default if None)
            locator: Container locator (default selectors if None)
            font_manager: Fonts for PDF text (system Unicode fonts if None)
            formula_renderer: Math renderer (uses the font manager's mono face if None)
            rasterizer: Block rasterizer (built from the options if None)
            progress_callback: Optional function(progress: float, desc: str) for progress updates
        """
        self.state = state if state is not None else default_export_state
        self.progress_callback = progress_callback
        self.locator = locator or ContentLocator()
        self.font_manager = font_manager or FontManager()
        self.formula_renderer = formula_renderer or FormulaRenderer(self.font_manager.mono_path)
        self.rasterizer = rasterizer

    async def export(self, options: ExportOptions) -> ExportResult:
        """Run one export.

        Args:
            options: Export configuration options

        Returns:
            ExportResult with output path and status

        Raises:
            Does not raise - all errors are captured in ExportResult.error
        """
        if not self.state.try_begin():
            print(f"Warning: {BUSY_NOTICE}")
            return ExportResult(status="rejected", status_message=BUSY_NOTICE)

        self.state.listener = self.progress_callback

        try:
            self.state.update(PROGRESS_STEPS["START"], "Processing 0%")
            result = await self._run(options)
        except Exception as e:
            self.state.fail(str(e))
            print(f"Warning: Error generating PDF: {e}")
            return ExportResult(
                status="failed",
                status_message=f"{FAILURE_NOTICE} {str(e)}",
                error=str(e),
            )
        else:
            self.state.finish()
            return result
        finally:
            # A cancelled export must release the guard
            if self.state.is_running:
                print("Warning: Export cancelled")
                self.state.fail("Export cancelled")

    async def _run(self, options: ExportOptions) -> ExportResult:
        # Step 1: Validation
        validate_html_path(options.html_path)
        check_file_size_limit(options.html_path, max_mb=MAX_FILE_SIZE_MB)

        # Step 2: Locate the chat container
        document = load_document(options.html_path)
        root = self.locator.find_or_raise(document)
        self.state.update(PROGRESS_STEPS["LOCATE"], "Processing 10%")

        if options.render_formulas and not self.formula_renderer.is_available():
            raise RendererUnavailableError(
                "Formula rendering is not available. The formula font could not be loaded."
            )

        # Step 3: Build and filter blocks
        rasterizer = self.rasterizer or BlockRasterizer(
            render_width_px=options.render_width_px,
            font_path=self.font_manager.regular_path,
            mono_font_path=self.font_manager.mono_path,
        )
        blocks, diagnostics = self.build_blocks(
            collect_message_nodes(root), rasterizer, options.render_formulas
        )
        self.state.update(PROGRESS_STEPS["COLLECT"], "Processing 20%")

        eligible, skipped = filter_eligible(blocks)
        diagnostics.extend(skipped)
        if not eligible:
            raise NoEligibleBlocksError(len(skipped))
        self.state.update(PROGRESS_STEPS["LAYOUT"], "Processing 50%")

        # Step 4: Layout
        geometry = options.geometry
        writer = PageWriter((geometry.page_width, geometry.page_height), self.font_manager)
        engine = PageLayoutEngine(writer, geometry, export_state=self.state)

        if options.render_formulas:
            engine.start(IMAGE_MODE_TITLE)
            await engine.layout_images(eligible, rasterizer.rasterize)
        else:
            engine.start(TEXT_MODE_TITLE)
            measure = reportlab_measure(self.font_manager.get_font_name(), TEXT_FONT_SIZE)
            engine.layout_text(eligible, measure)
        diagnostics.extend(engine.diagnostics)

        # Step 5: Page numbers and save
        page_count = engine.finalize()
        filename = build_output_filename(
            options.resolved_document_name, options.text_mode, options.export_date
        )
        output_path = os.path.join(options.output_dir, filename)
        try:
            writer.save(output_path)
        except Exception as e:
            raise PipelineStepError("save", e) from e

        return ExportResult(
            status="completed",
            status_message=TEXT_SUCCESS_NOTICE if options.text_mode else SUCCESS_NOTICE,
            output_pdf_path=output_path,
            page_count=page_count,
            blocks_placed=engine.blocks_placed,
            diagnostics=diagnostics,
        )

    def build_blocks(self, elements: Sequence, rasterizer: BlockRasterizer,
                     render_formulas: bool) -> Tuple[List[ContentBlock], List[str]]:
        """Turn message elements into measured, classified blocks.

        Args:
            elements: Message elements in document order
            rasterizer: Used to measure each block
            render_formulas: If True, render math spans before measuring

        Returns:
            Tuple of (blocks in document order, formula diagnostics)
        """
        blocks = []
        diagnostics = []
        for index, element in enumerate(elements):
            node = to_structural_node(element)
            if render_formulas:
                segments, failures = self.formula_renderer.render_segments(node.text)
                diagnostics.extend(failures)
            else:
                segments = (TextSegment(node.text),) if node.text else ()
            width, height = rasterizer.measure(node, segments)
            blocks.append(ContentBlock(
                raw_text=node.text,
                pixel_width=width,
                pixel_height=height,
                visible=is_visible(node),
                role=classify(node),
                node=node,
                segments=segments,
                index=index,
            ))
        return blocks, diagnostics
