from __future__ import annotations

from datetime import datetime, timezone

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from ghosthuman.api.v1.router import router as v1_router
from ghosthuman.core.config import get_settings
from ghosthuman.core.logging import configure_logging, get_logger
from ghosthuman.core.redis import close_redis, get_redis
from ghosthuman.schemas.common import ErrorResponse, HealthResponse, ReadyResponse
from ghosthuman.services.humanizer import get_humanizer_service
from ghosthuman.utils.trace import get_trace_id, trace_context_middleware

settings = get_settings()
configure_logging()
logger = get_logger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)


app = FastAPI(title=settings.app_name, default_response_class=ORJSONResponse)
app.middleware("http")(trace_context_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    return ORJSONResponse(
        status_code=422,
        content=ErrorResponse(detail=str(exc), trace_id=get_trace_id()).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("unhandled_exception", error=str(exc), trace_id=get_trace_id())
    return ORJSONResponse(
        status_code=500,
        content=ErrorResponse(detail="Internal server error", trace_id=get_trace_id()).model_dump(),
    )


Instrumentator().instrument(app).expose(app, include_in_schema=False)


@app.on_event("startup")
async def startup_event() -> None:
    if not settings.generation_configured:
        logger.warning("generation_api_key_missing", model=settings.openai_model)
    logger.info(
        "startup_complete",
        environment=settings.environment,
        model=settings.openai_model,
        rate_limit_enabled=settings.rate_limit_enabled,
    )


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await close_redis()
    client = get_humanizer_service().client
    aclose = getattr(client, "aclose", None)
    if aclose is not None:
        await aclose()


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/readyz", response_model=ReadyResponse)
async def readyz() -> ReadyResponse:
    redis_state = "disabled"
    redis = await get_redis()
    if redis is not None:
        await redis.ping()
        redis_state = "ok"
    return ReadyResponse(
        time=datetime.now(timezone.utc),
        generation_configured=settings.generation_configured,
        redis=redis_state,
    )


app.include_router(v1_router, prefix=settings.api_prefix)
