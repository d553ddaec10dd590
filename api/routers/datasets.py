from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from analytics.errors import DatasetError
from analytics.ingest import Dataset, read_upload
from api.config import MAX_UPLOAD_MB
from api.deps import current_session, session_payload, session_store, to_http_error
from storage.sessions import DatasetSession, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

# ────────────────────────────────────────────────────────────────────────────────
# Utility Functions
# ────────────────────────────────────────────────────────────────────────────────


async def _parse_upload(file: UploadFile) -> Dataset:
    """Read an uploaded file and parse it, mapping failures to HTTP errors"""
    content = await file.read()
    if len(content) > MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail={
                "error": "FileTooLarge",
                "message": f"File exceeds the {MAX_UPLOAD_MB} MB upload limit",
            },
        )

    try:
        return read_upload(file.filename, file.content_type, content)
    except DatasetError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        raise to_http_error(exc) from exc


# ────────────────────────────────────────────────────────────────────────────────
# Dataset Management
# ────────────────────────────────────────────────────────────────────────────────
@router.post("/upload", tags=["Dataset Upload"])
async def upload_dataset(
    file: UploadFile = File(...), store: SessionStore = Depends(session_store)
):
    """
    Upload a CSV file and start a new session
    Returns the session id and the parsed dataset summary
    """
    dataset = await _parse_upload(file)
    session = store.create(dataset, file.filename or "dataset.csv")
    return {
        **session_payload(session),
        "message": f"Successfully ingested {file.filename}",
    }


@router.post("/datasets/{session_id}/upload", tags=["Dataset Upload"])
async def replace_dataset(
    file: UploadFile = File(...), session: DatasetSession = Depends(current_session)
):
    """Replace the session's dataset; a failed parse leaves the old one in place"""
    dataset = await _parse_upload(file)
    session.load(dataset, file.filename or "dataset.csv")
    return {
        **session_payload(session),
        "message": f"Successfully ingested {file.filename}",
    }


@router.get("/datasets/{session_id}", tags=["Dataset Retrieval"])
def get_dataset(session: DatasetSession = Depends(current_session)):
    """Shape, column statistics, duplicates and pending edit of a session"""
    return session_payload(session)


@router.get("/datasets/{session_id}/preview", tags=["Dataset Retrieval"])
def preview_dataset(
    session: DatasetSession = Depends(current_session),
    limit: int = Query(default=10, ge=1, le=500),
):
    """Preview first N rows of a dataset"""
    dataset = session.dataset
    rows = dataset.records(limit)
    return {
        "success": True,
        "columns": dataset.columns,
        "data": rows,
        "rows_returned": len(rows),
        "total_rows": dataset.shape[0],
    }


@router.delete("/datasets/{session_id}", tags=["Dataset Management"])
def delete_dataset(session_id: str, store: SessionStore = Depends(session_store)):
    """Discard a session and its dataset"""
    if not store.delete(session_id):
        raise HTTPException(
            status_code=404,
            detail={"error": "DatasetNotFound", "message": "Session not found"},
        )
    return {"success": True, "session_id": session_id}
