from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, get_args, runtime_checkable

import httpx
import openai

from ghosthuman.core.config import Settings
from ghosthuman.core.logging import get_logger
from ghosthuman.services.prompts import (
    EVALUATOR_SYSTEM_PROMPT,
    RewriteConfiguration,
    build_evaluator_prompt,
    build_system_prompt,
    build_user_prompt,
)

logger = get_logger(__name__)

Severity = Literal["none", "minor", "major"]
VALID_SEVERITIES: tuple[str, ...] = get_args(Severity)

_CODE_FENCE_RE = re.compile(r"```json\n?|```")
_CREDENTIAL_HINTS = ("api key", "api_key", "apikey")


class GenerationServiceError(RuntimeError):
    """A call to the text-generation backend failed.

    The message of the underlying SDK error is kept so the HTTP layer can tell
    credential problems apart from everything else.
    """

    def __init__(self, message: str, *, credentials_problem: bool = False) -> None:
        super().__init__(message)
        self.credentials_problem = credentials_problem

    @classmethod
    def from_sdk_error(cls, exc: Exception) -> GenerationServiceError:
        message = str(exc) or exc.__class__.__name__
        lowered = message.lower()
        credentials_problem = isinstance(exc, openai.AuthenticationError) or any(
            hint in lowered for hint in _CREDENTIAL_HINTS
        )
        return cls(message, credentials_problem=credentials_problem)


@runtime_checkable
class GenerationClient(Protocol):
    async def generate(self, instructions: str, content: str, *, max_tokens: int | None = None) -> str: ...


class OpenAIGenerationClient:
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client: openai.AsyncOpenAI | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIGenerationClient:
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.openai_timeout_seconds,
        )

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is not None:
            return self._client
        try:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key or None,
                base_url=self.base_url,
                max_retries=0,
                http_client=httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds)),
            )
        except openai.OpenAIError as exc:
            logger.warning("generation_client_init_failed", error=str(exc))
            raise GenerationServiceError.from_sdk_error(exc) from exc
        logger.info("generation_client_ready", model=self.model, base_url=self.base_url or "default")
        return self._client

    async def generate(self, instructions: str, content: str, *, max_tokens: int | None = None) -> str:
        client = self._get_client()
        request: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": content},
            ],
        }
        if max_tokens is not None:
            request["max_completion_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            raise GenerationServiceError.from_sdk_error(exc) from exc

        usage = getattr(response, "usage", None)
        logger.debug(
            "generation_call_done",
            model=self.model,
            prompt_chars=len(instructions) + len(content),
            total_tokens=getattr(usage, "total_tokens", None),
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


@dataclass(frozen=True)
class MeaningVerdict:
    preserved: bool
    issues: tuple[str, ...] = field(default_factory=tuple)
    severity: Severity = "none"

    @classmethod
    def fail_open(cls) -> MeaningVerdict:
        return cls(preserved=True, issues=(), severity="none")

    @property
    def major_drift(self) -> bool:
        return not self.preserved and self.severity == "major"


@dataclass(frozen=True)
class VerdictParse:
    """Outcome of one meaning check: a parsed verdict or the reason there is none."""

    verdict: MeaningVerdict | None = None
    failure: str | None = None
    coerced_fields: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.verdict is not None

    def resolve(self) -> MeaningVerdict:
        if self.verdict is not None:
            return self.verdict
        return MeaningVerdict.fail_open()


def _failed(reason: str) -> VerdictParse:
    return VerdictParse(failure=reason)


def strip_code_fence(raw: str) -> str:
    return _CODE_FENCE_RE.sub("", raw).strip()


def parse_meaning_verdict(raw: str) -> VerdictParse:
    """Parse the evaluator's JSON reply.

    Only an unusable reply (empty, not JSON, not an object) fails as a whole.
    Each field that is missing or malformed falls back to its own default and
    is named in ``coerced_fields``. Severity must match exactly, so ``"MAJOR"``
    is treated as unknown and becomes ``"none"``.
    """
    cleaned = strip_code_fence(raw or "")
    if not cleaned:
        return _failed("empty_response")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        return _failed("invalid_json")

    if not isinstance(payload, dict):
        return _failed("not_an_object")

    coerced: list[str] = []

    preserved = payload.get("meaningPreserved")
    if preserved is None:
        preserved = True
    elif not isinstance(preserved, bool):
        coerced.append("meaningPreserved")
        preserved = True

    issues = payload.get("issuesFound")
    if issues is None:
        issues = []
    elif isinstance(issues, str):
        coerced.append("issuesFound")
        issues = [issues] if issues.strip() else []
    elif not isinstance(issues, list):
        coerced.append("issuesFound")
        issues = [str(issues)]

    severity = payload.get("severity")
    if severity is None:
        severity = "none"
    elif severity not in VALID_SEVERITIES:
        coerced.append("severity")
        severity = "none"

    return VerdictParse(
        verdict=MeaningVerdict(
            preserved=preserved,
            issues=tuple(str(item) for item in issues),
            severity=severity,
        ),
        coerced_fields=tuple(coerced),
    )


async def request_rewrite(
    client: GenerationClient,
    text: str,
    config: RewriteConfiguration,
    *,
    max_tokens: int | None = None,
) -> str:
    instructions = build_system_prompt(config)
    content = build_user_prompt(text)
    logger.info(
        "humanize_rewrite_requested",
        tone=config.tone,
        strength=config.strength,
        stricter=config.stricter,
        prompt_chars=len(instructions) + len(content),
    )
    rewritten = (await client.generate(instructions, content, max_tokens=max_tokens)).strip()
    if not rewritten:
        logger.warning("humanize_rewrite_empty_output", stricter=config.stricter)
    logger.info("humanize_rewrite_done", output_chars=len(rewritten))
    return rewritten


async def check_meaning(
    client: GenerationClient,
    original: str,
    rewritten: str,
    *,
    max_tokens: int | None = None,
) -> VerdictParse:
    try:
        raw = await client.generate(
            EVALUATOR_SYSTEM_PROMPT,
            build_evaluator_prompt(original, rewritten),
            max_tokens=max_tokens,
        )
    except Exception as exc:
        logger.warning("meaning_check_call_failed", error=str(exc), error_type=exc.__class__.__name__)
        return _failed(f"call_failed: {exc.__class__.__name__}")

    result = parse_meaning_verdict(raw)
    if result.ok:
        verdict = result.resolve()
        if result.coerced_fields:
            logger.warning("meaning_check_fields_defaulted", fields=list(result.coerced_fields))
        logger.info(
            "meaning_check_result",
            preserved=verdict.preserved,
            severity=verdict.severity,
            issue_count=len(verdict.issues),
        )
    else:
        logger.warning("meaning_check_unparseable_response", reason=result.failure, preview=(raw or "")[:180])
    return result
