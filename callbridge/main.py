# callbridge/main.py
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .errors import CallBridgeError, RequestRejected
from .routes.admin import router as admin_router
from .routes.ghl import router as ghl_router
from .routes.vodia import router as vodia_router
from .services.db import Database
from .services.directory import SubaccountDirectory
from .services.ghl_api import GhlForwarder
from .services.identity import IdentityStore
from .services.ledger import EventLedger
from .services.routing import InboundRouter, OutboundRouter

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    forwarder: Optional[GhlForwarder] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    db = database or Database.from_settings(settings)

    # ── DB init (dev-friendly; disable with DB_CREATE_ALL=0) ──────────────────
    if settings.db_create_all:
        try:
            db.create_all()
        except SQLAlchemyError:
            # don't crash on create_all failure; migrations may own the schema
            logger.exception("create_all failed")

    forwarder = forwarder or GhlForwarder(
        timeout=settings.ghl_forward_timeout,
        verify_ssl=settings.ghl_verify_ssl,
    )
    directory = SubaccountDirectory(db)
    identities = IdentityStore(db)
    ledger = EventLedger(db)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("callbridge starting (%s, db=%s)", settings.app_env, db.url.split("@")[-1])
        yield
        db.dispose()
        logger.info("callbridge stopped")

    app = FastAPI(title="callbridge (Vodia <-> GHL)", lifespan=lifespan)

    app.state.settings = settings
    app.state.db = db
    app.state.directory = directory
    app.state.identities = identities
    app.state.ledger = ledger
    app.state.inbound_router = InboundRouter(
        directory, identities, ledger, forwarder,
        email_domain=settings.placeholder_email_domain,
    )
    app.state.outbound_router = OutboundRouter(directory, identities, ledger)

    # ── Middleware: CORS & Trusted Hosts ──────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    # ── Errors ────────────────────────────────────────────────────────────────
    @app.exception_handler(CallBridgeError)
    async def _callbridge_error(request: Request, exc: CallBridgeError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        err = RequestRejected("invalid_payload", "Request body must be a JSON object")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=CallBridgeError().to_dict())

    # ── Basic health/root ─────────────────────────────────────────────────────
    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Middleware running"

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/health/db")
    def health_db():
        return db.health()

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(ghl_router, tags=["ghl"])
    app.include_router(vodia_router, tags=["vodia"])
    app.include_router(admin_router, tags=["admin"])

    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run("callbridge.main:create_app", factory=True, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
