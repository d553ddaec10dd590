from fastapi import APIRouter, Depends, HTTPException, Query

from analytics.errors import DatasetError
from analytics.profile import build_profile, column_distribution
from api.deps import current_session, to_http_error
from storage.sessions import DatasetSession

router = APIRouter()


# ────────────────────────────────────────────────────────────────────────────────
# Profile and Distribution Endpoints
# ────────────────────────────────────────────────────────────────────────────────
@router.get("/datasets/{session_id}/profile", tags=["Profiling"])
def get_profile(session: DatasetSession = Depends(current_session)):
    """Overview, variable analysis, correlations and missing values"""
    try:
        return {"success": True, "profile": build_profile(session.dataset)}
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Failed to build profile: {str(e)}"
        )


@router.get("/datasets/{session_id}/distribution", tags=["Profiling"])
def get_distribution(
    column: str,
    session: DatasetSession = Depends(current_session),
    bins: int = Query(default=20, ge=5, le=80),
    top_k: int = Query(default=20, ge=5, le=50),
):
    """Histogram for a numeric column, value counts for a categorical one"""
    try:
        distribution = column_distribution(session.dataset, column, bins, top_k)
    except DatasetError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, **distribution}
