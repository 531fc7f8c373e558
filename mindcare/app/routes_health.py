# mindcare/app/routes_health.py

from __future__ import annotations
from fastapi import APIRouter

from mindcare.exceptions import ConfigError, CorpusLoadError
from mindcare.services.support_service import get_engine

router = APIRouter()

@router.get("/health")
async def health():
    """
    헬스 체크 엔드포인트.

    - reports whether corpus / pattern tables loaded
    - the engine is loaded lazily, so the first call also warms it up
    """
    try:
        engine = get_engine()
    except (ConfigError, CorpusLoadError) as e:
        return {
            "status": "degraded",
            "service": "mindcare-emotion-engine",
            "error": str(e),
        }

    return {
        "status": "ok",
        "service": "mindcare-emotion-engine",
        "corpus_entries": len(engine.classifier.corpus),
        "languages": list(engine.classifier.patterns.languages.keys()),
    }
