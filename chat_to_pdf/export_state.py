"""Export State

Lifecycle of a single export: Idle -> Running -> (Done | Failed).

The state object doubles as the process-wide "in progress" guard: a second
export started while one is running is refused by try_begin() without
touching the running export's state.
"""
from enum import Enum
from typing import Callable, Optional

from .config import PROGRESS_STEPS

ProgressListener = Callable[[float, str], None]


class ExportStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class ExportState:
    """Status, progress and last error of the current export."""

    def __init__(self, listener: Optional[ProgressListener] = None):
        self.status = ExportStatus.IDLE
        self.progress = 0.0
        self.message = ""
        self.error: Optional[str] = None
        self.listener = listener

    @property
    def is_running(self) -> bool:
        return self.status is ExportStatus.RUNNING

    def try_begin(self) -> bool:
        """Move to RUNNING. Returns False, changing nothing, if already running."""
        if self.is_running:
            return False
        self.status = ExportStatus.RUNNING
        self.error = None
        self.progress = PROGRESS_STEPS["START"]
        self.message = ""
        return True

    def update(self, progress: float, message: str):
        self.progress = progress
        self.message = message
        if self.listener is not None:
            self.listener(progress, message)

    def update_layout_progress(self, position: int, total: int):
        """Spread per-block progress across the layout phase."""
        start = PROGRESS_STEPS["LAYOUT"]
        span = PROGRESS_STEPS["COMPLETE"] - start
        progress = start + span * position / total
        self.update(progress, f"Processing {int(progress * 100)}%")

    def finish(self):
        self.status = ExportStatus.DONE
        self.update(PROGRESS_STEPS["COMPLETE"], "Processing 100%")

    def fail(self, error: str):
        self.status = ExportStatus.FAILED
        self.error = error


# Process-wide guard shared by every export started from the app
default_export_state = ExportState()
