from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from analytics.errors import DatasetError
from analytics.export import render
from api.deps import current_session, to_http_error
from storage.sessions import DatasetSession

router = APIRouter()


@router.get("/datasets/{session_id}/download", tags=["Download"])
def download_dataset(
    session: DatasetSession = Depends(current_session),
    format: str = Query(default="csv", pattern="^(csv|json|tsv)$"),
):
    """Current table as a CSV, JSON or TSV attachment"""
    try:
        content, media_type, filename = render(session.dataset, format)
    except DatasetError as exc:
        raise to_http_error(exc) from exc

    return Response(
        content=content.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
