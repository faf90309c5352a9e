"""TransactionCoordinator — the single writer over the board snapshot.

Every load-mutate-save cycle, and every read that needs a consistent view,
runs inside one exclusion region owned by the coordinator.  The lock is
held for the whole cycle including disk I/O, so transactions observe a
strict total order and never interleave.

Three entry points:

- :meth:`apply` — run a mutator; save only if it returns normally.
- :meth:`read` — run a reader; never save.
- :meth:`compare_and_swap` — replace the whole document if, and only if,
  the caller's version token is still current.

INVARIANT: The snapshot file is never touched outside this lock.  One
coordinator exists per process; constructing two over the same file
breaks the guarantee.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

from mealplan.domain.errors import ConflictError
from mealplan.domain.schedule import reconcile

if TYPE_CHECKING:
    from mealplan.domain.schedule import Document
    from mealplan.infrastructure.store import DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionCoordinator:
    """Serializes all access to one :class:`DocumentStore`."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._owner: int | None = None

    @property
    def store(self) -> DocumentStore:
        return self._store

    @contextmanager
    def transaction(self, *, write: bool = True) -> Iterator[Document]:
        """Hold the exclusion region around one load(-mutate-save) cycle.

        The loaded document is yielded to the caller.  If the block exits
        normally and *write* is True the document is saved; if it raises,
        the document is discarded and the exception propagates.

        Usage::

            with coordinator.transaction() as doc:
                claim(doc, "Big cook", 0, "alice")
        """
        if not self._lock.acquire(blocking=False):
            if self._owned_by_current_thread():
                msg = "transactions do not nest"
                raise RuntimeError(msg)
            self._lock.acquire()
        self._owner = threading.get_ident()
        try:
            doc = self._store.load()
            yield doc
            if write:
                self._store.save(doc)
        finally:
            self._owner = None
            self._lock.release()

    def apply(self, mutator: Callable[[Document], T]) -> T:
        """Run *mutator* on the current document and persist its changes.

        Nothing is saved when *mutator* raises.
        """
        with self.transaction() as doc:
            return mutator(doc)

    def read(self, reader: Callable[[Document], T]) -> T:
        """Run *reader* on a consistent snapshot without saving."""
        with self.transaction(write=False) as doc:
            return reader(doc)

    def compare_and_swap(self, expected_version: str, replacement: Document) -> str:
        """Replace the whole document if *expected_version* is still current.

        Returns the new version token.

        Raises:
            ConflictError: another transaction committed since the caller
                read *expected_version*; nothing is written.
        """
        with self.transaction(write=False) as current:
            if current.version != expected_version:
                logger.info(
                    "Rejected stale overwrite (expected %s, actual %s)",
                    expected_version,
                    current.version,
                )
                raise ConflictError(
                    "document changed since it was read",
                    expected=expected_version,
                    actual=current.version,
                )
            replacement.duties = current.duties
            replacement.days = current.days
            replacement.version = current.version
            reconcile(replacement)
            self._store.save(replacement)
            return replacement.version

    def _owned_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()
