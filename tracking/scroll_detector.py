"""One-shot detection of a reader reaching the end of a chapter.

A ``ScrollSurface`` stands in for the scrollable element holding chapter
text: scroll metrics are dispatched to whatever listeners are attached. A
``ScrollCompletionDetector`` listens to one surface for one
(novel, chapter) mount and fires its completion callback the first time the
viewport bottom reaches the content bottom, and never again.

Attach through ``detector.mount(surface)`` so the listener is released on
every exit path; a listener left behind would keep reacting to scrolls of a
later chapter.
"""

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrollMetrics:
    scroll_top: float
    client_height: float
    scroll_height: float

    def reached_bottom(self) -> bool:
        # Rounded up so sub-pixel layout leaves no gap at the very bottom
        return math.ceil(self.scroll_top + self.client_height) >= self.scroll_height


ScrollListener = Callable[[ScrollMetrics], None]


class ScrollSurface:
    """Observable reading surface."""

    def __init__(self) -> None:
        self._listeners: List[ScrollListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: ScrollListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ScrollListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def dispatch(self, metrics: ScrollMetrics) -> None:
        for listener in list(self._listeners):
            listener(metrics)


class DetectorState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


CompletionCallback = Callable[[str, str], None]


class ScrollCompletionDetector:
    """PENDING -> COMPLETED exactly once per instance."""

    def __init__(self, novel_id: str, chapter_id: str, on_complete: CompletionCallback):
        self.novel_id = novel_id
        self.chapter_id = chapter_id
        self._on_complete = on_complete
        self._state = DetectorState.PENDING
        self._surface: Optional[ScrollSurface] = None

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def completed(self) -> bool:
        return self._state is DetectorState.COMPLETED

    @property
    def attached(self) -> bool:
        return self._surface is not None

    def attach(self, surface: ScrollSurface) -> None:
        if self._surface is not None:
            raise RuntimeError(
                f"Detector for chapter {self.chapter_id} is already attached"
            )
        surface.add_listener(self.handle_scroll)
        self._surface = surface

    def detach(self) -> None:
        if self._surface is None:
            return
        self._surface.remove_listener(self.handle_scroll)
        self._surface = None

    @contextmanager
    def mount(self, surface: ScrollSurface) -> Iterator["ScrollCompletionDetector"]:
        self.attach(surface)
        try:
            yield self
        finally:
            self.detach()

    def handle_scroll(self, metrics: ScrollMetrics) -> None:
        if self._state is DetectorState.COMPLETED:
            return
        if not metrics.reached_bottom():
            return

        self._state = DetectorState.COMPLETED
        # Completed is terminal, so the listener has nothing left to do
        self.detach()
        logger.debug("Bottom reached: novel=%s chapter=%s", self.novel_id, self.chapter_id)
        self._on_complete(self.novel_id, self.chapter_id)
