# mindcare/infra/paths.py
import os
from pathlib import Path

from mindcare.core.config import BASE_DIR, PACKAGE_DIR

DATA_DIR = Path(os.getenv("MINDCARE_DATA_DIR", str(PACKAGE_DIR / "data")))
OUTPUT_DIR = Path(os.getenv("MINDCARE_OUTPUT_DIR", str(BASE_DIR / "output")))
MEMORY_DIR = Path(os.getenv("MINDCARE_MEMORY_DIR", str(OUTPUT_DIR / "memory")))

CORPUS_PATH = DATA_DIR / "emotional_corpus.yaml"
PATTERNS_PATH = DATA_DIR / "emotion_patterns.yaml"
PHRASES_PATH = DATA_DIR / "therapeutic_phrases.yaml"


def ensure_output_dir() -> Path:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    return OUTPUT_DIR


def ensure_memory_dir() -> Path:
    MEMORY_DIR.mkdir(parents=True, exist_ok=True)
    return MEMORY_DIR
