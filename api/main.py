"""
FastAPI backend for the CSV cleaning dashboard
Handles uploads, per-session datasets, cleaning edits, profiling and downloads
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import LOG_LEVEL
from api.deps import session_store
from api.routers import cleaning, datasets, download, profiling
from storage.sessions import SessionStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="CSV Cleaning Dashboard API", version="1.0.0")
app.include_router(datasets.router)
app.include_router(cleaning.router)
app.include_router(profiling.router)
app.include_router(download.router)

# CORS - Allow Streamlit to talk to FastAPI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your Streamlit URL
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ────────────────────────────────────────────────────────────────────────────────
# Health Check
# ────────────────────────────────────────────────────────────────────────────────


@app.get("/")
def root():
    """Health check endpoint"""
    return {"status": "ok", "message": "CSV Cleaning Dashboard API is running"}


@app.get("/health")
def health(store: SessionStore = Depends(session_store)):
    """Detailed health check"""
    try:
        expired = store.prune()
        return {
            "status": "healthy",
            "sessions": len(store),
            "expired": expired,
        }
    except Exception as e:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "error": str(e)}
        )


# ────────────────────────────────────────────────────────────────────────────────
# Run the server
# ────────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="127.0.0.1", port=8000, reload=True)
