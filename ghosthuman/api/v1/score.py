from fastapi import APIRouter

from ghosthuman.schemas.humanize import QualityMetricsSchema, ScoreRequest
from ghosthuman.services.text_metrics import compute_quality_metrics

router = APIRouter()


@router.post("/score", response_model=QualityMetricsSchema)
async def score_rewrite(body: ScoreRequest) -> QualityMetricsSchema:
    return QualityMetricsSchema.from_metrics(compute_quality_metrics(body.original, body.rewritten))
