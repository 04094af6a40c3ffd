"""Font Manager Module

Handles font registration for Unicode chat text, with fallback to the
built-in Helvetica faces. The same TrueType files are handed to Pillow so
rasterized blocks and PDF text use matching faces.
"""
import os
from typing import List, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..exceptions import FontError

REGULAR_FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    '/usr/share/fonts/dejavu/DejaVuSans.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf',
    '/System/Library/Fonts/Supplemental/Arial Unicode.ttf',  # macOS
    'C:\\Windows\\Fonts\\arial.ttf',  # Windows
]

BOLD_FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    '/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf',
]

MONO_FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf',
    '/usr/share/fonts/dejavu/DejaVuSansMono.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf',
]


def _first_existing(paths: List[str]) -> Optional[str]:
    for path in paths:
        if path and os.path.exists(path):
            return path
    return None


class FontManager:
    """Registers Unicode-capable fonts with ReportLab.

    Attributes:
        font_name: Registered regular font (e.g., 'ChatSans' or 'Helvetica')
        font_name_bold: Registered bold font (e.g., 'ChatSans-Bold' or 'Helvetica-Bold')
        mono_font_name: Font for formula text (e.g., 'ChatMono' or 'Courier')
        regular_path / bold_path / mono_path: TrueType files in use, None for built-ins
    """

    def __init__(self, font_path: Optional[str] = None, register: bool = True):
        """
        Initialize FontManager.

        Args:
            font_path: Optional TrueType file to prefer for the regular face
            register: If False, stay on the built-in faces (useful in tests)

        Raises:
            FontError: If font_path is given but does not exist
        """
        if font_path and not os.path.exists(font_path):
            raise FontError(f"Font file not found: {font_path}")

        self.font_name = 'Helvetica'
        self.font_name_bold = 'Helvetica-Bold'
        self.mono_font_name = 'Courier'
        self.regular_path = None
        self.bold_path = None
        self.mono_path = None

        if register:
            self._setup_fonts(font_path)

    def _setup_fonts(self, font_path: Optional[str]):
        """Register regular, bold and monospace faces; keep built-ins where missing."""
        regular = _first_existing([font_path] + REGULAR_FONT_PATHS)
        if regular and self._register('ChatSans', regular):
            self.font_name = 'ChatSans'
            self.regular_path = regular

            bold = _first_existing(BOLD_FONT_PATHS)
            if bold and self._register('ChatSans-Bold', bold):
                self.font_name_bold = 'ChatSans-Bold'
                self.bold_path = bold
            else:
                print("Warning: Bold font not found, using regular font for labels")
                self.font_name_bold = self.font_name
                self.bold_path = regular
        else:
            print("Warning: No Unicode font found, using Helvetica (non-Latin text may not render)")

        mono = _first_existing(MONO_FONT_PATHS)
        if mono and self._register('ChatMono', mono):
            self.mono_font_name = 'ChatMono'
            self.mono_path = mono

    @staticmethod
    def _register(name: str, path: str) -> bool:
        try:
            pdfmetrics.registerFont(TTFont(name, path))
            print(f"DEBUG: Registered font {name} from: {path}")
            return True
        except Exception as e:
            print(f"Warning: Failed to register font {path}: {e}")
            return False

    def get_font_name(self, bold: bool = False) -> str:
        """
        Get the registered font name.

        Args:
            bold: If True, return the bold variant; otherwise return regular font

        Returns:
            Font name string suitable for use with ReportLab
        """
        return self.font_name_bold if bold else self.font_name
