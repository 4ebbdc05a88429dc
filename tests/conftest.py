from __future__ import annotations

import json
import sys
from dataclasses import dataclass

import pytest
import structlog

from ghosthuman.core.config import get_settings
from ghosthuman.services.prompts import EVALUATOR_SYSTEM_PROMPT


@dataclass
class GenerationCall:
    instructions: str
    content: str
    max_tokens: int | None


class ScriptedGenerationClient:
    """Plays back canned rewrites and meaning-check replies in order.

    Items that are exceptions get raised instead of returned.
    """

    def __init__(self, rewrites=(), verdicts=()) -> None:
        self.rewrites = list(rewrites)
        self.verdicts = list(verdicts)
        self.calls: list[GenerationCall] = []
        self.closed = False

    async def generate(self, instructions: str, content: str, *, max_tokens: int | None = None) -> str:
        self.calls.append(GenerationCall(instructions, content, max_tokens))
        queue = self.verdicts if instructions == EVALUATOR_SYSTEM_PROMPT else self.rewrites
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True

    @property
    def rewrite_calls(self) -> list[GenerationCall]:
        return [c for c in self.calls if c.instructions != EVALUATOR_SYSTEM_PROMPT]

    @property
    def check_calls(self) -> list[GenerationCall]:
        return [c for c in self.calls if c.instructions == EVALUATOR_SYSTEM_PROMPT]


def verdict_json(preserved: bool = True, issues: list[str] | None = None, severity: str = "none") -> str:
    return json.dumps({"meaningPreserved": preserved, "issuesFound": issues or [], "severity": severity})


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    for name in ("REDIS_URL", "OPENAI_API_KEY", "OPENAI_BASE_URL", "MAX_INPUT_CHARS", "API_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def stderr_logging():
    # Uncached loggers on stderr keep log lines out of captured stdout.
    structlog.configure(
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
