"""Configuration Constants

Constants for the chat-to-PDF export pipeline.
All physical lengths are in millimetres.
"""

# File Processing Limits
MAX_FILE_SIZE_MB = 50

# Progress Steps (for UI progress tracking)
PROGRESS_STEPS = {
    "START": 0.0,
    "LOCATE": 0.10,
    "COLLECT": 0.20,
    "LAYOUT": 0.50,
    "COMPLETE": 1.0,
}

# Page Geometry Defaults (A4 portrait, 1 inch margins)
DEFAULT_PAGE_WIDTH_MM = 210.0
DEFAULT_PAGE_HEIGHT_MM = 297.0
DEFAULT_MARGIN_MM = 25.4

# Block Placement
DEFAULT_LABEL_HEIGHT_MM = 5.0
DEFAULT_INTER_BLOCK_GAP_MM = 5.0
DEFAULT_MIN_SLICE_HEIGHT_MM = 20.0  # Keeps a label from being orphaned at the page bottom
DEFAULT_TITLE_OFFSET_MM = 15.0

# Text-only Mode
DEFAULT_TEXT_LINE_HEIGHT_MM = 10.0
DEFAULT_TEXT_BLOCK_GAP_MM = 5.0

# Footer
DEFAULT_FOOTER_OFFSET_MM = 10.0
FOOTER_FONT_SIZE = 10
FOOTER_GRAY = 150

# Fonts (points)
TITLE_FONT_SIZE = 18
LABEL_FONT_SIZE = 12
TEXT_FONT_SIZE = 12

# Titles and Labels
IMAGE_MODE_TITLE = "Chat History"
TEXT_MODE_TITLE = "Chat History (Text)"
PRIMARY_LABEL = "User:"
SECONDARY_LABEL = "Assistant:"
DEFAULT_DOCUMENT_NAME = "chat-history"

# Unit Conversion
CSS_DPI = 96.0
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

# Rasterizer Defaults (CSS pixels unless noted)
DEFAULT_RENDER_WIDTH_PX = 1000
DEFAULT_RASTER_SCALE = 2  # Device pixels per CSS pixel
DEFAULT_RASTER_FONT_SIZE_PX = 16
DEFAULT_RASTER_LINE_HEIGHT_PX = 24
DEFAULT_RASTER_PADDING_PX = 12
PRIMARY_BACKGROUND = (240, 244, 249)
SECONDARY_BACKGROUND = (255, 255, 255)
TEXT_COLOR = (33, 37, 41)
FORMULA_COLOR = (20, 60, 140)

# Content Container Selectors (tried in order, first non-empty match wins)
DEFAULT_CONTAINER_SELECTORS = [
    "[data-chat-container]",
    ".chat-container",
    ".conversation",
    "#messages",
    ".chat-history",
    "main",
    '[role="log"]',
    "body",
]

# Message Selectors (a block is any element matching one of these)
DEFAULT_MESSAGE_SELECTORS = [
    '[class*="message"]',
    "[data-message]",
    ".chat-message",
    "[data-message-author-role]",
]

# Export Notices
SUCCESS_NOTICE = "Chat history saved successfully!"
TEXT_SUCCESS_NOTICE = "Chat history (text) saved successfully!"
BUSY_NOTICE = "Already processing, please wait."
FAILURE_NOTICE = "Failed to generate PDF."
