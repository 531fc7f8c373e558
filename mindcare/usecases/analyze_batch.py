# mindcare/usecases/analyze_batch.py
# 설문/일기 모음 파일(CSV, Excel)의 모든 글을 분석하고 YAML 리포트로 저장하는 유스케이스
from __future__ import annotations

import argparse
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from mindcare.core.config import LOG_LEVEL
from mindcare.domain.types import severity_rank
from mindcare.exceptions import InputDataError
from mindcare.infra.output_repo import save_batch_report_yaml
from mindcare.services.support_service import SupportEngine, engine

logger = logging.getLogger(__name__)

_EXACT_TEXT_COLUMNS = ("text", "message", "entry", "journal", "notes", "response")
_TEXT_COLUMN_KEYS = ("text", "message", "entry", "journal", "note", "feel", "comment")


def detect_text_column(columns: List[Any]) -> Optional[str]:
    """
    텍스트 컬럼을 최대한 자동으로 찾는다.
    - exact (case-insensitive) name match first
    - otherwise the column whose name hits the most keywords
    """
    names = ["" if c is None else str(c).strip() for c in columns]

    for wanted in _EXACT_TEXT_COLUMNS:
        for name in names:
            if name.lower() == wanted:
                return name

    best, best_score = None, 0
    for name in names:
        score = sum(k in name.lower() for k in _TEXT_COLUMN_KEYS)
        if score > best_score:
            best, best_score = name, score
    return best


def read_table(path: Path, sheet: Optional[str] = None) -> pd.DataFrame:
    if not path.exists():
        raise InputDataError(f"input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        sheet_name: Any = 0
        if sheet is not None:
            sheet_name = int(sheet) if str(sheet).isdigit() else sheet
        return pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    if suffix in (".csv", ".txt"):
        return pd.read_csv(path)
    raise InputDataError(f"unsupported input type: {path.suffix}")


def analyze_frame(
    df: pd.DataFrame,
    text_col: Optional[str] = None,
    language_col: Optional[str] = None,
    default_language: str = "en",
    max_rows: int = 0,
    support: Optional[SupportEngine] = None,
) -> Dict[str, Any]:
    """Classify every non-empty text cell; rows are independent (no history)."""
    col = text_col or detect_text_column(list(df.columns))
    if col is None or col not in df.columns:
        raise InputDataError(f"text column not found. columns={list(df.columns)}")

    eng = support or engine()
    rows: List[Dict[str, Any]] = []
    emotions: Counter = Counter()
    severities: Counter = Counter()

    for idx, row in df.iterrows():
        if max_rows and len(rows) >= max_rows:
            break

        value = row[col]
        if pd.isna(value):
            continue
        text = str(value).strip()
        if not text:
            continue

        language = default_language
        if language_col and language_col in df.columns and not pd.isna(row[language_col]):
            language = str(row[language_col]).strip() or default_language

        analysis = eng.classifier.classify(text, language, ())
        complex_emotions = eng.complex_emotions(text)
        emotions[analysis.detected_emotion] += 1
        severities[analysis.severity] += 1

        rows.append(
            {
                "row": idx.item() if hasattr(idx, "item") else idx,
                "language": language,
                "detected_emotion": analysis.detected_emotion,
                "severity": analysis.severity,
                "confidence": round(analysis.confidence, 3),
                "is_crisis": analysis.is_crisis,
                "support_type": analysis.support_type,
                "complex_emotions": complex_emotions,
                "best_match_ids": [e.id for e in analysis.similar_entries],
            }
        )

        if len(rows) % 50 == 0:
            logger.info("[analyze_batch] processed=%d", len(rows))

    return {
        "text_column": col,
        "processed": len(rows),
        "crisis_rows": [r["row"] for r in rows if r["is_crisis"]],
        "emotion_counts": dict(emotions.most_common()),
        "severity_counts": dict(severities.most_common()),
        "max_severity": max(severities, key=severity_rank) if severities else None,
        "rows": rows,
    }


def main() -> None:
    ap = argparse.ArgumentParser(description="Analyse a CSV/Excel file of student messages.")
    ap.add_argument("--input", required=True, help="input .csv or .xlsx path")
    ap.add_argument("--sheet", default=None, help="sheet name or index (Excel only)")
    ap.add_argument("--text_col", default=None, help="text column (auto-detected if omitted)")
    ap.add_argument("--lang_col", default=None, help="optional per-row language column")
    ap.add_argument("--lang", default="en", help="default language code")
    ap.add_argument("--max_rows", type=int, default=0, help="0 = all rows")
    ap.add_argument("--output_dir", default=None, help="report directory (default: output/)")
    args = ap.parse_args()

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    path = Path(args.input)
    df = read_table(path, args.sheet)
    report = analyze_frame(
        df,
        text_col=args.text_col,
        language_col=args.lang_col,
        default_language=args.lang,
        max_rows=args.max_rows,
    )
    report["source"] = str(path)

    out = save_batch_report_yaml(
        path.name,
        report,
        Path(args.output_dir) if args.output_dir else None,
    )
    logger.info(
        "[analyze_batch] done. processed=%d crisis=%d report=%s",
        report["processed"],
        len(report["crisis_rows"]),
        out,
    )


if __name__ == "__main__":
    main()
