"""Per-reader navigation state.

A ``ReaderSession`` is what one reader (a signed-in user, or an anonymous
client holding a reader id) has open: at most one chapter mount, with its
scroll surface and one-shot detector. Every navigation bumps a generation
counter; a resolution that finishes after a newer navigation started is
dropped instead of replacing what the newer one shows.

``ReaderRegistry`` keeps the sessions of this process, finds the session
owning a mount id, and evicts the least recently used session past a cap.
"""

import logging
import uuid
from collections import OrderedDict
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Dict, Optional

from exceptions import NotFoundError
from tracking.auth_context import AuthContext, UserIdentity
from tracking.counter_updater import CounterUpdater
from tracking.scroll_detector import (
    DetectorState,
    ScrollCompletionDetector,
    ScrollMetrics,
    ScrollSurface,
)
from tracking.session_state import ChapterContext, SessionStateResolver

logger = logging.getLogger(__name__)


class ChapterMount:
    """A mounted chapter: surface plus detector, released by ``close()``."""

    def __init__(self, novel_id: str, chapter_id: str, counters: CounterUpdater):
        self.mount_id = uuid.uuid4().hex
        self.novel_id = novel_id
        self.chapter_id = chapter_id
        self.surface = ScrollSurface()
        self.detector = ScrollCompletionDetector(novel_id, chapter_id, counters.chapter_finished)
        self._resources = ExitStack()
        self._resources.enter_context(self.detector.mount(self.surface))
        self.closed = False

    @property
    def state(self) -> DetectorState:
        return self.detector.state

    def scroll(self, metrics: ScrollMetrics) -> DetectorState:
        if not self.closed:
            self.surface.dispatch(metrics)
        return self.detector.state

    def close(self) -> None:
        if self.closed:
            return
        self._resources.close()
        self.closed = True


@dataclass
class Navigation:
    context: ChapterContext
    mount: Optional[ChapterMount] = None


class ReaderSession:
    def __init__(
        self,
        reader_id: str,
        resolver: SessionStateResolver,
        counters: CounterUpdater,
        auth: Optional[AuthContext] = None,
    ):
        self.reader_id = reader_id
        self.resolver = resolver
        self.counters = counters
        self.auth = auth or AuthContext()
        self._user_id = self.auth.user_id
        self._unsubscribe = self.auth.subscribe(self._on_auth_change)
        self._generation = 0
        self._mount: Optional[ChapterMount] = None
        self.closed = False

    @property
    def mount(self) -> Optional[ChapterMount]:
        return self._mount

    def _on_auth_change(self, user: Optional[UserIdentity]) -> None:
        self._user_id = user.user_id if user else None

    def _close_mount(self) -> None:
        if self._mount is not None:
            self._mount.close()
            self._mount = None

    async def navigate(self, novel_id: str, chapter_id: str) -> Optional[Navigation]:
        """Open ``chapter_id``; returns None when superseded mid-flight."""
        if self.closed:
            raise RuntimeError(f"Reader session {self.reader_id} is closed")

        self._generation += 1
        generation = self._generation
        self._close_mount()

        context = await self.resolver.resolve(novel_id, chapter_id)

        if generation != self._generation:
            logger.debug(
                "Discarding stale navigation: reader=%s novel=%s chapter=%s",
                self.reader_id, novel_id, chapter_id,
            )
            return None
        if not context.found:
            return Navigation(context)

        if self._user_id:
            self.resolver.record_last_read(self._user_id, novel_id, context.current["chapterNumber"])

        self._mount = ChapterMount(novel_id, chapter_id, self.counters)
        return Navigation(context, self._mount)

    def scroll(self, mount_id: str, metrics: ScrollMetrics) -> DetectorState:
        return self._require_mount(mount_id).scroll(metrics)

    def unmount(self, mount_id: str) -> None:
        self._require_mount(mount_id)
        self._close_mount()

    def _require_mount(self, mount_id: str) -> ChapterMount:
        if self._mount is None or self._mount.mount_id != mount_id:
            raise NotFoundError("Mount", mount_id)
        return self._mount

    def close(self) -> None:
        if self.closed:
            return
        # Anything still resolving belongs to a page nobody will see
        self._generation += 1
        self._close_mount()
        self._unsubscribe()
        self.auth.close()
        self.closed = True


class ReaderRegistry:
    def __init__(self, resolver: SessionStateResolver, counters: CounterUpdater, max_sessions: int = 10000):
        self.resolver = resolver
        self.counters = counters
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ReaderSession]" = OrderedDict()
        self._mount_owners: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, reader_id: str) -> bool:
        return reader_id in self._sessions

    def get(self, reader_id: str) -> Optional[ReaderSession]:
        return self._sessions.get(reader_id)

    def session(self, reader_id: str, user: Optional[UserIdentity] = None) -> ReaderSession:
        session = self._sessions.get(reader_id)
        if session is None:
            session = ReaderSession(reader_id, self.resolver, self.counters, AuthContext(user))
            self._sessions[reader_id] = session
            self._evict()
        else:
            self._sessions.move_to_end(reader_id)
            session.auth.set_user(user)
        return session

    def _evict(self) -> None:
        while len(self._sessions) > self.max_sessions:
            reader_id, session = self._sessions.popitem(last=False)
            logger.info("Evicting reader session %s", reader_id)
            self._forget_mount(session)
            session.close()

    def _forget_mount(self, session: ReaderSession) -> None:
        if session.mount is not None:
            self._mount_owners.pop(session.mount.mount_id, None)

    async def navigate(
        self, reader_id: str, user: Optional[UserIdentity], novel_id: str, chapter_id: str
    ) -> Optional[Navigation]:
        session = self.session(reader_id, user)
        self._forget_mount(session)
        navigation = await session.navigate(novel_id, chapter_id)
        if navigation is not None and navigation.mount is not None and not session.closed:
            self._mount_owners[navigation.mount.mount_id] = reader_id
        return navigation

    def _owner(self, mount_id: str) -> ReaderSession:
        reader_id = self._mount_owners.get(mount_id)
        session = self._sessions.get(reader_id) if reader_id else None
        if session is None or session.mount is None or session.mount.mount_id != mount_id:
            self._mount_owners.pop(mount_id, None)
            raise NotFoundError("Mount", mount_id)
        return session

    def scroll(self, mount_id: str, metrics: ScrollMetrics) -> DetectorState:
        return self._owner(mount_id).scroll(mount_id, metrics)

    def unmount(self, mount_id: str) -> None:
        session = self._owner(mount_id)
        self._mount_owners.pop(mount_id, None)
        session.unmount(mount_id)

    def close(self, reader_id: str) -> bool:
        session = self._sessions.pop(reader_id, None)
        if session is None:
            return False
        self._forget_mount(session)
        session.close()
        return True

    def close_user(self, user_id: str) -> int:
        """Close every session signed in as ``user_id``, one per open page."""
        prefix = f"user:{user_id}"
        owned = [r for r in self._sessions if r == prefix or r.startswith(prefix + ":")]
        for reader_id in owned:
            self.close(reader_id)
        return len(owned)

    def close_all(self) -> None:
        for reader_id in list(self._sessions):
            self.close(reader_id)
