from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from intent_router.api.deps import require_router
from intent_router.core.intent.router import IntentRouter
from intent_router.core.logging import get_logger

_log = get_logger("api.classify")

router = APIRouter(tags=["Routing"])

MAX_QUERY_CHARS = 2000


class ClassifyRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=MAX_QUERY_CHARS)
    include_methods: bool = True


class AlternativeModel(BaseModel):
    intent: str
    confidence: float


class ClassifyResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    intent: str
    confidence: float
    method: str
    winning_method: Optional[str] = None
    alternatives: list[AlternativeModel] = []
    model_version: Optional[int] = None
    matched_pattern: Optional[str] = None
    votes: dict[str, float] = {}
    latency_ms: float = 0.0
    method_results: Optional[dict[str, Any]] = None


class FeedbackRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=MAX_QUERY_CHARS)
    predicted_intent: str = Field(..., min_length=1)
    actual_intent: str = Field(..., min_length=1)
    was_correct: bool


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    accepted: bool = True
    retrained: bool
    buffer_size: int
    retrain_threshold: int
    model_version: int


@router.post("/classify", response_model=ClassifyResponse)
async def classify_query(request: ClassifyRequest, intent_router: IntentRouter = Depends(require_router)):
    result = await intent_router.classify(request.query)
    return result.to_dict(include_methods=request.include_methods)


@router.post("/feedback", response_model=FeedbackResponse)
def submit_feedback(request: FeedbackRequest, intent_router: IntentRouter = Depends(require_router)):
    retrained = intent_router.record_feedback(
        request.query,
        request.predicted_intent,
        request.actual_intent,
        request.was_correct,
    )
    if retrained:
        _log.info("Feedback triggered retrain", version=intent_router.classifier.version)
    return FeedbackResponse(
        retrained=retrained,
        buffer_size=intent_router.feedback.buffer_size,
        retrain_threshold=intent_router.feedback.threshold,
        model_version=intent_router.classifier.version,
    )


@router.get("/stats")
def router_stats(intent_router: IntentRouter = Depends(require_router)):
    return intent_router.get_stats()
