"""FastAPI entrypoint for the tailor shop order and payment tracker."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from tailor_shop.api.v1.api import api_router
from tailor_shop.core.config import settings
from tailor_shop.db import session as db_session
from tailor_shop.db.base import Base
from tailor_shop.services.account_service import ensure_default_admin

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            admin_present = ensure_default_admin(session)
            logger.info("[BOOTSTRAP] default admin present: %s", "yes" if admin_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Admin bootstrap failed; continuing startup.")


@app.get("/health", summary="Liveness check")
def health() -> dict[str, str]:
    return {"status": "ok", "service": settings.app_name}
