from datetime import datetime

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    trace_id: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadyResponse(BaseModel):
    status: str = "ready"
    time: datetime
    generation_configured: bool
    redis: str = "disabled"
