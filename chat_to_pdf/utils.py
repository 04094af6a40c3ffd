"""Utilities Module

Helper functions for the chat export application.
"""
import os
import re
from datetime import date
from typing import Optional

from .exceptions import InvalidFileError, FileSizeLimitExceededError

HTML_EXTENSIONS = ('.html', '.htm')


def validate_html_path(html_path: str) -> None:
    """
    Validate a saved chat page exists and has an HTML extension.

    Args:
        html_path: Path to the saved HTML document

    Raises:
        InvalidFileError: If file doesn't exist or has wrong extension
    """
    if not html_path:
        raise InvalidFileError("HTML path cannot be empty")

    if not os.path.exists(html_path):
        raise InvalidFileError(f"File does not exist: {html_path}")

    if not html_path.lower().endswith(HTML_EXTENSIONS):
        raise InvalidFileError(f"File must have .html or .htm extension: {html_path}")


def clean_filename(filename: str) -> str:
    """
    Clean filename for safe saving.

    Args:
        filename: Original filename

    Returns:
        Cleaned filename
    """
    # Remove path components
    filename = os.path.basename(filename)

    # Remove extension
    name, _ = os.path.splitext(filename)

    # Replace invalid characters
    name = re.sub(r'[^\w\s-]', '', name)

    # Replace spaces with hyphens
    name = re.sub(r'\s+', '-', name.strip())

    # Limit length
    if len(name) > 50:
        name = name[:50]

    return name or 'document'


def build_output_filename(document_name: str, text_mode: bool = False,
                          export_date: Optional[date] = None) -> str:
    """
    Build the output filename for an export.

    Args:
        document_name: Base name, e.g. "chat-history"
        text_mode: True for the plain-text export
        export_date: Date stamp (defaults to today)

    Returns:
        "<name>-<YYYY-MM-DD>.pdf" or "<name>-text-<YYYY-MM-DD>.pdf"

    Examples:
        >>> build_output_filename("chat-history", export_date=date(2024, 5, 1))
        'chat-history-2024-05-01.pdf'
        >>> build_output_filename("chat-history", True, date(2024, 5, 1))
        'chat-history-text-2024-05-01.pdf'
    """
    stamp = (export_date or date.today()).isoformat()
    if text_mode:
        return f"{document_name}-text-{stamp}.pdf"
    return f"{document_name}-{stamp}.pdf"


def check_file_size_limit(file_path: str, max_mb: int = 50) -> float:
    """
    Check if file is within size limit.

    Args:
        file_path: Path to file
        max_mb: Maximum size in MB

    Returns:
        File size in MB

    Raises:
        FileSizeLimitExceededError: If file exceeds size limit
        InvalidFileError: If file size cannot be determined
    """
    try:
        size_bytes = os.path.getsize(file_path)
    except OSError as e:
        raise InvalidFileError(f"Error checking file size: {str(e)}")

    size_mb = size_bytes / (1024 * 1024)
    if size_mb > max_mb:
        raise FileSizeLimitExceededError(size_mb, max_mb)

    return size_mb
