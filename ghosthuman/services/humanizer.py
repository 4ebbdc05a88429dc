from __future__ import annotations

import asyncio
import enum
import time
from dataclasses import dataclass
from functools import lru_cache

from ghosthuman.core.config import get_settings
from ghosthuman.core.logging import get_logger
from ghosthuman.services.generation import (
    GenerationClient,
    MeaningVerdict,
    OpenAIGenerationClient,
    check_meaning,
    request_rewrite,
)
from ghosthuman.services.prompts import RewriteConfiguration, Strength, Tone
from ghosthuman.services.text_metrics import QualityMetrics, compute_quality_metrics

logger = get_logger(__name__)


class HumanizeStage(str, enum.Enum):
    REWRITING = "rewriting"
    CHECKING_MEANING = "checking_meaning"
    RETRY_REWRITING = "retry_rewriting"
    RETRY_CHECKING_MEANING = "retry_checking_meaning"
    DONE = "done"


class HumanizeCancelledError(Exception):
    def __init__(self, stage: HumanizeStage) -> None:
        super().__init__(f"Humanize cancelled before {stage.value}")
        self.stage = stage


@dataclass(frozen=True)
class HumanizeOptions:
    tone: Tone
    strength: Strength
    preserve_key_points: bool = False

    def to_configuration(self) -> RewriteConfiguration:
        return RewriteConfiguration(
            tone=self.tone,
            strength=self.strength,
            preserve_key_points=self.preserve_key_points,
        )


@dataclass(frozen=True)
class HumanizeResult:
    original: str
    rewritten: str
    metrics: QualityMetrics
    meaning_check: MeaningVerdict
    retried: bool


class HumanizerService:
    """Rewrite, check meaning, retry once on major drift, then score.

    Runs at most two rewrite+check cycles per call. Only a verdict of
    ``preserved=False`` with ``severity="major"`` triggers the second cycle,
    which uses the stricter configuration. Rewrite failures propagate;
    meaning-check failures resolve to the fail-open verdict.
    """

    def __init__(
        self,
        client: GenerationClient,
        *,
        rewrite_max_tokens: int | None = None,
        meaning_check_max_tokens: int | None = None,
    ) -> None:
        self.client = client
        self.rewrite_max_tokens = rewrite_max_tokens
        self.meaning_check_max_tokens = meaning_check_max_tokens

    @staticmethod
    def _enter(stage: HumanizeStage, cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("humanize_cancelled", stage=stage.value)
            raise HumanizeCancelledError(stage)
        logger.debug("humanize_stage", stage=stage.value)

    async def _cycle(
        self,
        text: str,
        config: RewriteConfiguration,
        *,
        rewrite_stage: HumanizeStage,
        check_stage: HumanizeStage,
        cancel_event: asyncio.Event | None,
    ) -> tuple[str, MeaningVerdict]:
        self._enter(rewrite_stage, cancel_event)
        rewritten = await request_rewrite(self.client, text, config, max_tokens=self.rewrite_max_tokens)

        self._enter(check_stage, cancel_event)
        parsed = await check_meaning(self.client, text, rewritten, max_tokens=self.meaning_check_max_tokens)
        return rewritten, parsed.resolve()

    async def humanize(
        self,
        text: str,
        options: HumanizeOptions,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> HumanizeResult:
        start = time.perf_counter()
        config = options.to_configuration()

        rewritten, verdict = await self._cycle(
            text,
            config,
            rewrite_stage=HumanizeStage.REWRITING,
            check_stage=HumanizeStage.CHECKING_MEANING,
            cancel_event=cancel_event,
        )
        retried = False

        if verdict.major_drift:
            logger.info("humanize_major_drift_retry", issue_count=len(verdict.issues))
            rewritten, verdict = await self._cycle(
                text,
                config.as_stricter(),
                rewrite_stage=HumanizeStage.RETRY_REWRITING,
                check_stage=HumanizeStage.RETRY_CHECKING_MEANING,
                cancel_event=cancel_event,
            )
            retried = True

        metrics = compute_quality_metrics(text, rewritten)
        logger.info(
            "humanize_complete",
            stage=HumanizeStage.DONE.value,
            retried=retried,
            meaning_preserved=verdict.preserved,
            overall_score=metrics.overall_score,
            latency_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        return HumanizeResult(
            original=text,
            rewritten=rewritten,
            metrics=metrics,
            meaning_check=verdict,
            retried=retried,
        )


@lru_cache
def get_humanizer_service() -> HumanizerService:
    settings = get_settings()
    return HumanizerService(
        OpenAIGenerationClient.from_settings(settings),
        rewrite_max_tokens=settings.rewrite_max_completion_tokens,
        meaning_check_max_tokens=settings.meaning_check_max_completion_tokens,
    )
