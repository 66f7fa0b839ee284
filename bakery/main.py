"""FastAPI entrypoint for the bakery storefront and back-office API."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bakery.api.v1.api import api_router
from bakery.core.config import settings
from bakery.db import session as db_session
from bakery.db.base import Base
from bakery.db.seed import ensure_admin_user
from bakery.services.errors import BakeryError

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(BakeryError)
def bakery_error_handler(request: Request, exc: BakeryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"type": type(exc).__name__, "message": exc.message}},
        headers=headers,
    )


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            admin_present = ensure_admin_user(session)
            logger.info("[BOOTSTRAP] default admin present: %s", "yes" if admin_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "environment": settings.app_env}
