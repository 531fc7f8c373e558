# mindcare/app/routes_analysis.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Literal, Union
from fastapi import APIRouter
from pydantic import BaseModel, Field
from mindcare.services import support_service
from mindcare.exceptions import InputDataError, AnalysisError

logger = logging.getLogger(__name__)
router = APIRouter()

# ---------------------------
# Request schemas
# ---------------------------

class AnalyzeRequest(BaseModel):
    text: str = Field("", description="user message (empty allowed)")
    language: str = Field("en", description="language code, unknown codes fall back to English")
    history: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="recent emotional memory, most recent first",
    )
    compose: bool = Field(True, description="also build a therapeutic message")


class TextRequest(BaseModel):
    text: str = Field("", description="user message")


class SimilarRequest(BaseModel):
    text: str = Field("", description="user message")
    limit: int = Field(5, ge=1, le=20, description="max entries returned")


class ChatRequest(BaseModel):
    user_id: str = Field(..., description="opaque user id (memory file key)")
    text: str = Field(..., description="user message")
    language: str = Field("en", description="language code")
    is_voice: bool = Field(False, description="message came from voice input")
    mood_entries: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="mood tracker records, most recent first; seed memory for users without history",
    )

# ---------------------------
# Response schemas
# ---------------------------

class CorpusEntryModel(BaseModel):
    id: int
    category: str
    sample_input: str
    response: str
    coping_strategy: str
    emotion_tags: List[str]
    severity_level: str
    support_type: str


class AnalysisModel(BaseModel):
    detected_emotion: str
    severity: str
    confidence: float
    suggested_response: str
    coping_strategy: str
    support_type: str
    is_crisis: bool
    similar_entries: List[CorpusEntryModel]
    emotion_tags: List[str]
    keyword_count: int = 0


class AnalyzeSuccessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    result: AnalysisModel
    complex_emotions: List[str]
    message: str | None = None


class ComplexSuccessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    labels: List[str]


class SimilarSuccessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    entries: List[CorpusEntryModel]


class ChatResult(BaseModel):
    reply: str
    suggestion: str
    analysis: AnalysisModel
    complex_emotions: List[str]
    mood_pattern: str


class ChatSuccessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    result: ChatResult


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error_type: str
    message: str


def _internal_error() -> ErrorResponse:
    logger.exception("unexpected internal error")
    return ErrorResponse(
        error_type="internal_error",
        message="Internal server error. Please try again shortly.",
    )

# ---------------------------
# Routes
# ---------------------------

@router.post(
    "/analyze",
    response_model=Union[AnalyzeSuccessResponse, ErrorResponse],
)
async def analyze_route(req: AnalyzeRequest):
    """
    단일 메시지 감정 분석 API.

    - input: text + language + recent history
    - output: analysis result, complex emotions and (optionally) a composed message
    """
    try:
        engine = support_service.engine()
        analysis = engine.classifier.classify(req.text, req.language, req.history)
        complex_emotions = engine.complex_emotions(req.text)

        message = None
        if req.compose:
            message = engine.composer.compose(
                analysis.detected_emotion,
                analysis.severity,
                analysis.support_type,
                analysis=analysis,
                complex_emotions=complex_emotions,
                language=req.language,
            )

        return AnalyzeSuccessResponse(
            result=analysis.to_dict(),
            complex_emotions=complex_emotions,
            message=message,
        )

    except AnalysisError as e:
        logger.error("analysis error: %s", e)
        return ErrorResponse(error_type="analysis_error", message=str(e))

    except Exception:
        return _internal_error()


@router.post(
    "/complex",
    response_model=Union[ComplexSuccessResponse, ErrorResponse],
)
async def complex_route(req: TextRequest):
    try:
        return ComplexSuccessResponse(labels=support_service.detect_complex(req.text))
    except AnalysisError as e:
        logger.error("analysis error: %s", e)
        return ErrorResponse(error_type="analysis_error", message=str(e))
    except Exception:
        return _internal_error()


@router.post(
    "/similar",
    response_model=Union[SimilarSuccessResponse, ErrorResponse],
)
async def similar_route(req: SimilarRequest):
    """Raw corpus matches without classification (empty list when nothing scores)."""
    try:
        entries = support_service.find_similar(req.text, req.limit)
        return SimilarSuccessResponse(entries=[e.to_dict() for e in entries])
    except AnalysisError as e:
        logger.error("analysis error: %s", e)
        return ErrorResponse(error_type="analysis_error", message=str(e))
    except Exception:
        return _internal_error()


@router.post(
    "/chat",
    response_model=Union[ChatSuccessResponse, ErrorResponse],
)
async def chat_route(req: ChatRequest):
    """
    Chat turn API.

    - loads and updates the user's emotional memory
    - returns the composed reply, suggestion and analysis
    """
    try:
        result = support_service.chat(
            user_id=req.user_id,
            text=req.text,
            language=req.language,
            is_voice=req.is_voice,
            mood_entries=req.mood_entries,
        )
        return ChatSuccessResponse(result=result)

    except InputDataError as e:
        logger.warning("input data error: %s", e)
        return ErrorResponse(error_type="input_data_error", message=str(e))

    except AnalysisError as e:
        logger.error("analysis error: %s", e)
        return ErrorResponse(error_type="analysis_error", message=str(e))

    except Exception:
        return _internal_error()
