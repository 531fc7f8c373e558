# mindcare/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# 프로젝트 루트 (mindcare/ 의 상위)
BASE_DIR = Path(__file__).resolve().parents[2]
PACKAGE_DIR = Path(__file__).resolve().parents[1]

# .env 로딩
ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)

# Log level (LOG_LEVEL in .env, default INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS
# - CORS_ORIGINS="http://localhost:3000,http://127.0.0.1:8000" in .env
# - unset means allow all (["*"])
_cors_raw = os.getenv("CORS_ORIGINS", "")
if _cors_raw:
    CORS_ORIGINS = [o.strip() for o in _cors_raw.split(",") if o.strip()]
else:
    CORS_ORIGINS = ["*"]


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineSettings:
    """Tunables of the emotion-analysis engine.

    - similar_limit: how many corpus entries the matcher shortlists
    - result_limit: how many similar entries are kept on the result
    - crisis_confidence: fixed confidence reported on the crisis path
    - memory_limit: max emotional memory entries kept per user
    - response_seed: seed of the opener picker (None = unseeded)
    - default_language: language used when the caller passes none
    """

    similar_limit: int = 5
    result_limit: int = 3
    crisis_confidence: float = 0.95
    memory_limit: int = 50
    response_seed: Optional[int] = None
    default_language: str = "en"


def load_settings() -> EngineSettings:
    """
    MINDCARE_* 환경변수 기준으로 엔진 설정 로드

    Environment
    - MINDCARE_SIMILAR_LIMIT (default: 5)
    - MINDCARE_RESULT_LIMIT (default: 3)
    - MINDCARE_CRISIS_CONFIDENCE (default: 0.95)
    - MINDCARE_MEMORY_LIMIT (default: 50)
    - MINDCARE_RESPONSE_SEED (default: unset)
    - MINDCARE_DEFAULT_LANGUAGE (default: en)
    """
    seed_raw = os.getenv("MINDCARE_RESPONSE_SEED")
    try:
        seed = int(seed_raw) if seed_raw not in (None, "") else None
    except ValueError:
        seed = None

    return EngineSettings(
        similar_limit=max(1, _env_int("MINDCARE_SIMILAR_LIMIT", 5)),
        result_limit=max(1, _env_int("MINDCARE_RESULT_LIMIT", 3)),
        crisis_confidence=min(1.0, max(0.0, _env_float("MINDCARE_CRISIS_CONFIDENCE", 0.95))),
        memory_limit=max(1, _env_int("MINDCARE_MEMORY_LIMIT", 50)),
        response_seed=seed,
        default_language=os.getenv("MINDCARE_DEFAULT_LANGUAGE", "en").strip() or "en",
    )
