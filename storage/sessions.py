# storage/sessions.py
"""
In-memory session store.

Each upload gets a DatasetSession owning the dataset of record and at most one
pending edit. Nothing is written to disk; sessions expire after a TTL.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from analytics.errors import DatasetNotFound, NoPendingEdit
from analytics.ingest import Dataset, build_dataset

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass
class PendingEdit:
    """Candidate table produced by an edit, waiting for confirm or cancel"""

    table: pd.DataFrame
    label: str
    created_at: float = field(default_factory=time.time)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.table.shape[0], self.table.shape[1]

    @property
    def columns(self) -> List[str]:
        return [str(c) for c in self.table.columns]


@dataclass
class DatasetSession:
    session_id: str
    dataset: Dataset
    filename: str
    pending: Optional[PendingEdit] = None
    created_at: float = field(default_factory=time.time)
    touched_at: float = field(default_factory=time.time)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)

    def touch(self) -> None:
        self.touched_at = time.time()

    def load(self, dataset: Dataset, filename: str) -> None:
        """Replace the dataset wholesale; any pending edit is dropped"""
        with self._lock:
            self.dataset = dataset
            self.filename = filename
            self.pending = None
            self.touch()
        logger.info("Session %s loaded %s %s", self.session_id, filename, dataset.shape)

    def propose(self, build: Callable[[Dataset], pd.DataFrame], label: str) -> PendingEdit:
        """
        Build a candidate table from the current dataset and hold it as the
        pending edit, replacing any earlier one.

        `build` runs under the session lock so it always sees the dataset of
        record; an exception from it leaves the session unchanged.
        """
        with self._lock:
            pending = PendingEdit(table=build(self.dataset), label=label)
            self.pending = pending
            self.touch()
        logger.info("Session %s pending edit: %s %s", self.session_id, label, pending.shape)
        return pending

    def confirm(self) -> Dataset:
        """Promote the pending table to the dataset of record"""
        with self._lock:
            if self.pending is None:
                raise NoPendingEdit()
            label = self.pending.label
            self.dataset = build_dataset(self.pending.table)
            self.pending = None
            self.touch()
            dataset = self.dataset
        logger.info("Session %s applied: %s %s", self.session_id, label, dataset.shape)
        return dataset

    def cancel(self) -> bool:
        with self._lock:
            had_pending = self.pending is not None
            self.pending = None
            self.touch()
        if had_pending:
            logger.info("Session %s discarded pending edit", self.session_id)
        return had_pending


class SessionStore:
    """Thread-safe registry of dataset sessions keyed by UUID"""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, DatasetSession] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _prune(self, now: float) -> int:
        cutoff = now - self.ttl_seconds
        expired = [sid for sid, s in self._sessions.items() if s.touched_at < cutoff]
        for sid in expired:
            self._sessions.pop(sid, None)
        if expired:
            logger.info("Expired %d idle sessions", len(expired))
        return len(expired)

    def prune(self, now: Optional[float] = None) -> int:
        with self._lock:
            return self._prune(now if now is not None else time.time())

    def create(self, dataset: Dataset, filename: str) -> DatasetSession:
        session = DatasetSession(
            session_id=str(uuid.uuid4()), dataset=dataset, filename=filename
        )
        with self._lock:
            self._prune(time.time())
            self._sessions[session.session_id] = session
        logger.info("Created session %s for %s %s", session.session_id, filename, dataset.shape)
        return session

    def get(self, session_id: str) -> DatasetSession:
        with self._lock:
            self._prune(time.time())
            session = self._sessions.get(session_id)
        if session is None:
            raise DatasetNotFound(session_id)
        session.touch()
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Deleted session %s", session_id)
        return session is not None


_store: Optional[SessionStore] = None
_store_lock = Lock()


def get_store(ttl_seconds: int = DEFAULT_TTL_SECONDS) -> SessionStore:
    """Return the process-wide session store"""
    global _store
    with _store_lock:
        if _store is None:
            _store = SessionStore(ttl_seconds)
    return _store
