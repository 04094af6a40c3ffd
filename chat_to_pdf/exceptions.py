"""Custom Exception Hierarchy

Exception hierarchy for the chat-to-PDF exporter, separating fatal
precondition failures from the per-block and per-formula failures that the
layout engine absorbs.
"""


class ChatToPDFError(Exception):
    """Base exception for all chat-to-PDF errors.

    This is the root of the exception hierarchy. Catching this exception
    will catch all custom exceptions raised by the exporter.
    """
    pass


# Validation Errors
class ValidationError(ChatToPDFError):
    """Raised when input validation fails."""
    pass


class InvalidFileError(ValidationError):
    """Raised when file validation fails (doesn't exist, wrong extension, etc.)."""
    pass


class FileSizeLimitExceededError(ValidationError):
    """Raised when the input document exceeds the size limit."""

    def __init__(self, file_size: float, max_size: float):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"File size {file_size:.1f} MB exceeds maximum allowed size {max_size:.1f} MB"
        )


class InvalidConfigurationError(ValidationError):
    """Raised when layout or export configuration is invalid."""
    pass


# Precondition Errors (fatal to the whole export, raised before any page is opened)
class PreconditionError(ChatToPDFError):
    """Base class for failures that abort an export before layout starts."""
    pass


class ContentRootNotFoundError(PreconditionError):
    """Raised when no candidate selector yields a non-empty content container."""

    def __init__(self, selectors: list):
        self.selectors = selectors
        super().__init__(
            f"Chat container not detected (tried {len(selectors)} selectors)"
        )


class NoEligibleBlocksError(PreconditionError):
    """Raised when the container holds no visible, non-empty, non-zero-sized block."""

    def __init__(self, skipped: int = 0):
        self.skipped = skipped
        super().__init__(
            f"No eligible message blocks found ({skipped} skipped)"
        )


class RendererUnavailableError(PreconditionError):
    """Raised when formula rendering is requested but its assets cannot be loaded."""
    pass


# Rendering Errors
class RenderingError(ChatToPDFError):
    """Base class for PDF rendering errors."""
    pass


class FontError(RenderingError):
    """Raised when font setup or registration fails."""
    pass


class BlockRasterizationError(RenderingError):
    """Raised when a content block cannot be rasterized."""

    def __init__(self, block_index: int, reason: str):
        self.block_index = block_index
        super().__init__(f"Failed to rasterize block {block_index}: {reason}")


class ImageSplitError(RenderingError):
    """Raised when a rasterized block cannot be split into page slices."""
    pass


class FormulaRenderingError(RenderingError):
    """Raised when a math span cannot be rendered."""

    def __init__(self, source: str, reason: str):
        self.source = source
        super().__init__(f"Failed to render formula '{source}': {reason}")


# Pipeline Errors
class PipelineError(ChatToPDFError):
    """Base class for export orchestration errors."""
    pass


class PipelineStepError(PipelineError):
    """Raised when a specific pipeline step fails.

    This wraps the underlying exception while preserving the pipeline context.
    """

    def __init__(self, step_name: str, original_exception: Exception):
        self.step_name = step_name
        self.original_exception = original_exception
        super().__init__(
            f"Pipeline step '{step_name}' failed: {str(original_exception)}"
        )


class LayoutFinalizedError(PipelineError):
    """Raised when content is placed after the page numbers were stamped."""
    pass
