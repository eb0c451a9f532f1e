# agencydesk/main.py
from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agencydesk.config import configure_logging, env_str
from agencydesk.errors import ConflictError, NotFoundError, ValidationError
from agencydesk.utils.request_id import RequestIDMiddleware

# ── Import routers ──
from agencydesk.api import (
    agents,
    commissions,
    policies,
    records,
    health as health_api,
)

configure_logging()
logger = logging.getLogger(__name__)

# ── App ──
app = FastAPI(title="AgencyDesk", version="1.0.0")

app.add_middleware(RequestIDMiddleware)

# Optional CORS for a local UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in env_str(
        "CORS_ORIGINS", "http://localhost,http://127.0.0.1,http://localhost:5173,http://127.0.0.1:5173"
    ).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── APIVersionRewrite middleware: /api/v1/* -> /api/* ──
@app.middleware("http")
async def api_version_rewrite(request: Request, call_next: Callable):
    path: str = request.scope.get("path", "")
    if path.startswith("/api/v1/"):
        request.scope["path"] = "/api/" + path[len("/api/v1/"):]
    resp: Response = await call_next(request)
    return resp


# ── Domain errors -> HTTP ──
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.message, "fields": exc.fields})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.info("Conflict on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=409, content={"detail": exc.message})


# ── Mount all routers under /api (v1 comes via middleware) ──
app.include_router(agents.router, prefix="/api")
app.include_router(policies.router, prefix="/api")
app.include_router(commissions.router, prefix="/api")
for _router in records.routers:
    app.include_router(_router, prefix="/api")
app.include_router(health_api.router, prefix="")   # /healthz, /readyz


@app.get("/")
def root() -> dict:
    return {"status": "OK", "docs": "/docs"}
