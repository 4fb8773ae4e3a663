"""Reading-progress and view-count tracking."""

from tracking.auth_context import AuthContext, UserIdentity
from tracking.background import BackgroundWriter
from tracking.counter_updater import CounterUpdater
from tracking.reader import ChapterMount, Navigation, ReaderRegistry, ReaderSession
from tracking.scroll_detector import (
    DetectorState,
    ScrollCompletionDetector,
    ScrollMetrics,
    ScrollSurface,
)
from tracking.session_state import ChapterContext, SessionStateResolver, library_path, locate

__all__ = [
    "AuthContext",
    "UserIdentity",
    "BackgroundWriter",
    "CounterUpdater",
    "ChapterMount",
    "Navigation",
    "ReaderRegistry",
    "ReaderSession",
    "DetectorState",
    "ScrollCompletionDetector",
    "ScrollMetrics",
    "ScrollSurface",
    "ChapterContext",
    "SessionStateResolver",
    "library_path",
    "locate",
]
