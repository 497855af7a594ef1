"""Navigation state and asset-load bookkeeping for one rendering session."""

from dataclasses import dataclass, field, replace
import logging
import threading
from typing import Callable
from urllib.parse import quote, unquote

from models import Detail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """
    The person the tree is centred on and how much of the family to show.

    A session is replaced, never mutated: re-rooting or changing the detail
    level produces a new Session and a full recompute of visibility and layout.
    """

    root: str
    detail: Detail = field(default_factory=Detail)

    def reroot(self, name: str) -> "Session":
        return replace(self, root=name)

    def with_detail(self, detail: Detail) -> "Session":
        return replace(self, detail=detail)

    def fragment(self) -> str:
        """Deep link for this view, e.g. "#Homer%20Simpson:2"."""
        return f"#{quote(self.root)}:{self.detail}"

    @classmethod
    def from_fragment(cls, fragment: str, default_root: str) -> "Session":
        """Rebuild a session from fragment(), falling back to `default_root`."""
        if not fragment.startswith("#"):
            return cls(default_root)
        name, _, detail = fragment[1:].partition(":")
        root = unquote(name) or default_root
        return cls(root, Detail.parse(detail) if detail else Detail())


class LoadBarrier:
    """
    Counts outstanding asset loads and fires `on_ready` once they have all settled.

    Each asset calls expect() once and later calls the returned settle function,
    whether the load succeeded or failed. After seal() no more assets will be
    registered; `on_ready` then runs exactly once, as soon as every expected
    load has settled.
    """

    def __init__(self, on_ready: Callable[[], None]):
        self.on_ready = on_ready
        self.expected = 0
        self.settled = 0
        self.sealed = False
        self.released = False
        self._lock = threading.Lock()

    def expect(self) -> Callable[[], None]:
        with self._lock:
            if self.sealed:
                raise RuntimeError("Cannot expect more loads after the barrier is sealed")
            self.expected += 1
        done = False

        def settle():
            nonlocal done
            with self._lock:
                if done:
                    return
                done = True
                self.settled += 1
            self._maybe_release()

        return settle

    def seal(self):
        with self._lock:
            self.sealed = True
        self._maybe_release()

    def _maybe_release(self):
        with self._lock:
            if self.released or not self.sealed or self.settled < self.expected:
                return
            self.released = True
        logger.debug("All %d asset loads settled", self.expected)
        self.on_ready()
