"""Hierarchical cancellation scopes."""
from __future__ import annotations

import threading
from typing import List, Optional


class CancellationScope:
    """A node in a cancellation tree.

    Cancelling a scope cancels every descendant, including children created
    after the cancellation.  Waiters block on a :class:`threading.Event` so
    nothing polls a shared flag.
    """

    def __init__(self, parent: Optional["CancellationScope"] = None) -> None:
        self._parent = parent
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: List[CancellationScope] = []

    @property
    def parent(self) -> Optional["CancellationScope"]:
        return self._parent

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def child(self) -> "CancellationScope":
        """Create a scope that is cancelled together with this one."""

        scope = CancellationScope(parent=self)
        with self._lock:
            if self._event.is_set():
                scope._event.set()
            else:
                self._children.append(scope)
        return scope

    def cancel(self) -> None:
        """Cancel this scope and all of its descendants.  Idempotent."""

        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)
            self._children.clear()
        for scope in children:
            scope.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block for up to ``timeout`` seconds; return ``True`` once cancelled."""

        return self._event.wait(timeout)

    def detach(self) -> None:
        """Drop this scope from its parent's children."""

        parent = self._parent
        if parent is None:
            return
        with parent._lock:
            if self in parent._children:
                parent._children.remove(self)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"<CancellationScope {state} children={len(self._children)}>"
