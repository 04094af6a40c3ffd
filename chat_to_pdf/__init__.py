"""Chat to PDF

Exports a saved chat page to a paginated PDF, either as rasterized message
blocks with rendered math or as plain wrapped text.
"""

from .export_options import ExportOptions
from .export_result import ExportResult
from .export_state import ExportState, ExportStatus, default_export_state
from .pipeline import ChatExportPipeline

__all__ = [
    'ChatExportPipeline',
    'ExportOptions',
    'ExportResult',
    'ExportState',
    'ExportStatus',
    'default_export_state',
]
