# agencydesk/api/health.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from agencydesk.api.deps import Repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Health"])


@router.get("/healthz")
def healthz() -> Dict[str, Any]:
    # App is up
    return {"status": "ok", "service": "agencydesk"}


@router.get("/readyz")
def readyz(repo: Repo) -> Dict[str, Any]:
    try:
        repo.ping()
    except Exception as e:
        logger.error("Readiness DB ping failed: %s", e)
        raise HTTPException(status_code=503, detail=f"DB ping failed: {e}")
    return {"status": "ok", "db": "ok"}
