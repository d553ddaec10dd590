"""Cleaning endpoints: every edit produces a pending preview that must be confirmed."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from analytics import editor
from analytics.errors import DatasetError
from analytics.ingest import Dataset
from api.deps import current_session, pending_payload, session_payload, to_http_error
from storage.sessions import DatasetSession

logger = logging.getLogger(__name__)

router = APIRouter()


class RemoveColumnsRequest(BaseModel):
    columns: List[str] = Field(..., min_length=1)


class FillRuleModel(BaseModel):
    method: str = Field(..., description="constant, mean, median or mode")
    value: Optional[Any] = None


class FillMissingRequest(BaseModel):
    rules: Dict[str, FillRuleModel]


def _propose(
    session: DatasetSession, build: Callable[[Dataset], pd.DataFrame], label: str
) -> Dict[str, Any]:
    try:
        pending = session.propose(build, label)
    except DatasetError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "pending": pending_payload(pending)}


# ────────────────────────────────────────────────────────────────────────────────
# Edits
# ────────────────────────────────────────────────────────────────────────────────
@router.post("/datasets/{session_id}/clean/remove-columns", tags=["Cleaning"])
def remove_columns(
    request: RemoveColumnsRequest, session: DatasetSession = Depends(current_session)
):
    """Preview the table without the selected columns"""
    return _propose(
        session,
        lambda dataset: editor.remove_columns(dataset, request.columns),
        "Remove columns: " + ", ".join(request.columns),
    )


@router.post("/datasets/{session_id}/clean/remove-duplicates", tags=["Cleaning"])
def remove_duplicates(session: DatasetSession = Depends(current_session)):
    """Preview the table with duplicate rows dropped"""
    return _propose(session, editor.remove_duplicates, "Remove duplicate rows")


@router.post("/datasets/{session_id}/clean/fill-missing", tags=["Cleaning"])
def fill_missing(
    request: FillMissingRequest, session: DatasetSession = Depends(current_session)
):
    """Preview the table with missing cells filled per column"""
    if not request.rules:
        raise HTTPException(
            status_code=400,
            detail={"error": "InvalidFillRule", "message": "Choose at least one column to fill"},
        )
    rules = {
        column: editor.FillRule(method=rule.method, value=rule.value)
        for column, rule in request.rules.items()
    }
    return _propose(
        session,
        lambda dataset: editor.fill_missing(dataset, rules),
        editor.describe_fill(rules),
    )


# ────────────────────────────────────────────────────────────────────────────────
# Pending edit
# ────────────────────────────────────────────────────────────────────────────────
@router.get("/datasets/{session_id}/pending", tags=["Cleaning"])
def get_pending(session: DatasetSession = Depends(current_session)):
    return {"success": True, "pending": pending_payload(session.pending)}


@router.post("/datasets/{session_id}/pending/confirm", tags=["Cleaning"])
def confirm_pending(session: DatasetSession = Depends(current_session)):
    """Make the pending table the dataset of record"""
    try:
        session.confirm()
    except DatasetError as exc:
        raise to_http_error(exc) from exc
    return session_payload(session)


@router.delete("/datasets/{session_id}/pending", tags=["Cleaning"])
def cancel_pending(session: DatasetSession = Depends(current_session)):
    discarded = session.cancel()
    return {"success": True, "discarded": discarded}
