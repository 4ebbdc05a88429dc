from __future__ import annotations

import time

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError

from ghosthuman.core.config import get_settings
from ghosthuman.core.logging import get_logger
from ghosthuman.core.rate_limit import enforce_sliding_window
from ghosthuman.core.redis import get_redis
from ghosthuman.schemas.humanize import HumanizeRequest, HumanizeResponse
from ghosthuman.services.generation import GenerationServiceError
from ghosthuman.services.humanizer import HumanizerService, get_humanizer_service
from ghosthuman.utils.http import client_ip
from ghosthuman.utils.request_body import read_json_object
from ghosthuman.utils.text import word_count

logger = get_logger(__name__)

router = APIRouter()

CREDENTIALS_ERROR_DETAIL = "The text-generation API key is missing or invalid. Check the OPENAI_API_KEY setting."
GENERIC_ERROR_DETAIL = "Failed to humanize text. Please try again."


@router.post("/humanize", response_model=HumanizeResponse)
async def humanize_content(
    request: Request,
    service: HumanizerService = Depends(get_humanizer_service),
):
    settings = get_settings()
    ip = client_ip(request)

    redis = await get_redis()
    if redis is not None:
        rl = await enforce_sliding_window(
            redis,
            key=f"rl:humanize:{ip}",
            limit=settings.humanize_rate_limit_per_minute,
            window_seconds=60,
        )
        if not rl.allowed:
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Humanize rate limit exceeded")

    payload = await read_json_object(request)
    try:
        body = HumanizeRequest.model_validate(payload)
    except ValidationError as exc:
        message = exc.errors()[0]["msg"]
        logger.info("humanize_validation_failed", reason=message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message) from exc

    text = body.text.strip()
    logger.info(
        "humanize_started",
        text_chars=len(text),
        word_count=word_count(text),
        tone=body.tone,
        strength=body.strength,
        preserve_key_points=body.preserve_key_points,
    )

    start = time.perf_counter()
    try:
        result = await service.humanize(text, body.to_options())
    except GenerationServiceError as exc:
        logger.error(
            "humanize_failed",
            error=str(exc),
            credentials_problem=exc.credentials_problem,
            latency_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        if exc.credentials_problem:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=CREDENTIALS_ERROR_DETAIL) from exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_ERROR_DETAIL) from exc

    logger.info(
        "humanize_succeeded",
        latency_ms=round((time.perf_counter() - start) * 1000, 3),
        rewritten_chars=len(result.rewritten),
        meaning_preserved=result.meaning_check.preserved,
        overall_score=result.metrics.overall_score,
        retried=result.retried,
    )
    return HumanizeResponse.from_result(result)
