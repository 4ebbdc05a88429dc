from __future__ import annotations

from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from ghosthuman.core.config import get_settings
from ghosthuman.services.generation import MeaningVerdict
from ghosthuman.services.humanizer import HumanizeOptions, HumanizeResult
from ghosthuman.services.prompts import VALID_STRENGTHS, VALID_TONES
from ghosthuman.services.text_metrics import QualityMetrics


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_text(value: object, empty_message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("empty_text", empty_message)
    max_chars = get_settings().max_input_chars
    if len(value) > max_chars:
        raise PydanticCustomError(
            "text_too_long",
            "Text is too long. Maximum {max_chars} characters allowed.",
            {"max_chars": f"{max_chars:,}"},
        )
    return value


class HumanizeRequest(CamelModel):
    text: str = Field(default="", validate_default=True)
    tone: str | None = Field(default=None, validate_default=True)
    strength: str | None = Field(default=None, validate_default=True)
    preserve_key_points: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, value: object) -> str:
        return _check_text(value, "Please provide some text to humanize.")

    @field_validator("tone", mode="before")
    @classmethod
    def validate_tone(cls, value: object) -> str:
        if value not in VALID_TONES:
            raise PydanticCustomError(
                "invalid_tone",
                "Invalid tone. Choose from: {choices}",
                {"choices": ", ".join(VALID_TONES)},
            )
        return value

    @field_validator("strength", mode="before")
    @classmethod
    def validate_strength(cls, value: object) -> str:
        if value not in VALID_STRENGTHS:
            raise PydanticCustomError(
                "invalid_strength",
                "Invalid strength. Choose from: {choices}",
                {"choices": ", ".join(VALID_STRENGTHS)},
            )
        return value

    @field_validator("preserve_key_points", mode="before")
    @classmethod
    def coerce_preserve_key_points(cls, value: object) -> bool:
        return bool(value)

    def to_options(self) -> HumanizeOptions:
        return HumanizeOptions(tone=self.tone, strength=self.strength, preserve_key_points=self.preserve_key_points)


class ScoreRequest(CamelModel):
    original: str
    rewritten: str

    @field_validator("original", "rewritten", mode="before")
    @classmethod
    def validate_texts(cls, value: object) -> str:
        return _check_text(value, "Text must be a non-empty string.")


class QualityMetricsSchema(CamelModel):
    readability_before: float
    readability_after: float
    readability_improved: bool
    length_ratio: float
    sentence_variance_before: float
    sentence_variance_after: float
    passive_voice_before: int
    passive_voice_after: int
    filler_count_before: int
    filler_count_after: int
    overall_score: int

    @classmethod
    def from_metrics(cls, metrics: QualityMetrics) -> QualityMetricsSchema:
        return cls(**asdict(metrics))


class MeaningCheckSchema(CamelModel):
    preserved: bool
    issues: list[str]
    severity: str

    @classmethod
    def from_verdict(cls, verdict: MeaningVerdict) -> MeaningCheckSchema:
        return cls(preserved=verdict.preserved, issues=list(verdict.issues), severity=verdict.severity)


class HumanizeResponse(CamelModel):
    original: str
    rewritten: str
    metrics: QualityMetricsSchema
    meaning_check: MeaningCheckSchema
    retried: bool

    @classmethod
    def from_result(cls, result: HumanizeResult) -> HumanizeResponse:
        return cls(
            original=result.original,
            rewritten=result.rewritten,
            metrics=QualityMetricsSchema.from_metrics(result.metrics),
            meaning_check=MeaningCheckSchema.from_verdict(result.meaning_check),
            retried=result.retried,
        )
