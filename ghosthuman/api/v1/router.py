from fastapi import APIRouter

from ghosthuman.api.v1 import humanize, score

router = APIRouter()
router.include_router(humanize.router, tags=["humanize"])
router.include_router(score.router, tags=["score"])
