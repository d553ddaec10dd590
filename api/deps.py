"""
Shared dependencies and helpers for the API routers
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Depends, HTTPException

from analytics.errors import (
    DatasetError,
    DatasetNotFound,
    MalformedRow,
    NoPendingEdit,
    UnsupportedFileType,
)
from analytics.ingest import to_python
from api.config import PREVIEW_ROWS, SESSION_TTL_SECONDS
from storage.sessions import DatasetSession, PendingEdit, SessionStore, get_store


def session_store() -> SessionStore:
    return get_store(SESSION_TTL_SECONDS)


def current_session(
    session_id: str, store: SessionStore = Depends(session_store)
) -> DatasetSession:
    try:
        return store.get(session_id)
    except DatasetNotFound as exc:
        raise to_http_error(exc) from exc


def to_http_error(exc: DatasetError) -> HTTPException:
    """Map a domain error to the status code and detail the UI expects"""
    detail: Dict[str, Any] = {"error": type(exc).__name__, "message": str(exc)}

    if isinstance(exc, DatasetNotFound):
        return HTTPException(status_code=404, detail=detail)
    if isinstance(exc, UnsupportedFileType):
        return HTTPException(status_code=415, detail=detail)
    if isinstance(exc, NoPendingEdit):
        return HTTPException(status_code=409, detail=detail)
    if isinstance(exc, MalformedRow):
        detail.update(row=exc.row_index, expected=exc.expected, actual=exc.actual)
    return HTTPException(status_code=400, detail=detail)


def pending_payload(pending: PendingEdit | None, limit: int = PREVIEW_ROWS) -> Dict[str, Any] | None:
    if pending is None:
        return None
    rows = [
        {column: to_python(value) for column, value in row.items()}
        for row in pending.table.head(limit).to_dict(orient="records")
    ]
    return {
        "label": pending.label,
        "shape": list(pending.shape),
        "columns": pending.columns,
        "rows": rows,
    }


def session_payload(session: DatasetSession) -> Dict[str, Any]:
    return {
        "success": True,
        "session_id": session.session_id,
        "filename": session.filename,
        **session.dataset.summary(),
        "pending": pending_payload(session.pending),
    }
