import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import Base, engine
from .logging import setup_logging, RequestIdMiddleware
from .services.errors import DomainError
from .auth.router import router as auth_router
from .routes.tap import router as tap_router
from .routes.events import router as events_router
from .routes.leads import router as leads_router
from .routes.reps import router as reps_router
from .routes.tags import router as tags_router
from .routes.jobs import router as jobs_router
from .routes.deal_page import router as deal_page_router


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_db:
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./var/"):
            os.makedirs("var", exist_ok=True)
        Base.metadata.create_all(bind=engine)
        logger.info("database_ready", tables=sorted(Base.metadata.tables))
    yield
    logger.info("shutdown")


async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid payload", "details": jsonable_encoder(exc.errors())},
    )


def create_app(enable_metrics: Optional[bool] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(tap_router)
    app.include_router(events_router)
    app.include_router(leads_router)
    app.include_router(reps_router)
    app.include_router(tags_router)
    app.include_router(jobs_router)
    app.include_router(deal_page_router)

    @app.get("/health", tags=["system"])
    def health():
        return {"status": "ok", "service": settings.app_name, "version": settings.version}

    # Metrics
    if settings.metrics_enabled if enable_metrics is None else enable_metrics:
        Instrumentator().instrument(app).expose(app)

    return app


app = create_app()
