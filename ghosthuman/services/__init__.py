from ghosthuman.services.generation import (
    GenerationClient,
    GenerationServiceError,
    MeaningVerdict,
    OpenAIGenerationClient,
    VerdictParse,
)
from ghosthuman.services.humanizer import (
    HumanizeCancelledError,
    HumanizeOptions,
    HumanizeResult,
    HumanizerService,
)
from ghosthuman.services.prompts import RewriteConfiguration
from ghosthuman.services.text_metrics import QualityMetrics, compute_quality_metrics

__all__ = [
    "GenerationClient",
    "GenerationServiceError",
    "MeaningVerdict",
    "OpenAIGenerationClient",
    "VerdictParse",
    "HumanizeCancelledError",
    "HumanizeOptions",
    "HumanizeResult",
    "HumanizerService",
    "RewriteConfiguration",
    "QualityMetrics",
    "compute_quality_metrics",
]
