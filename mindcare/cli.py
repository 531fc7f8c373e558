#  mindcare/cli.py
from __future__ import annotations

import argparse
import json
import logging

from mindcare.core.config import LOG_LEVEL
from mindcare.services import support_service


def main() -> None:
    ap = argparse.ArgumentParser(description="Analyse one message with the emotion engine.")
    ap.add_argument("--text", required=True)
    ap.add_argument("--lang", default="en", help="language code (unknown codes use English)")
    ap.add_argument(
        "--history-emotion",
        action="append",
        default=[],
        help="previous emotion, most recent first (repeatable)",
    )
    ap.add_argument("--compose", action="store_true", help="also print a composed therapeutic message")
    ap.add_argument("--similar", type=int, default=0, help="print N raw corpus matches instead")
    args = ap.parse_args()

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    if args.similar:
        entries = support_service.find_similar(args.text, args.similar)
        print(json.dumps([e.to_dict() for e in entries], ensure_ascii=False, indent=2))
        return

    history = [{"emotion": e} for e in args.history_emotion]
    analysis = support_service.classify(args.text, args.lang, history)
    out = {
        "analysis": analysis.to_dict(),
        "complex_emotions": support_service.detect_complex(args.text),
    }

    if args.compose:
        engine = support_service.engine()
        out["message"] = engine.composer.compose(
            analysis.detected_emotion,
            analysis.severity,
            analysis.support_type,
            analysis=analysis,
            complex_emotions=out["complex_emotions"],
            language=args.lang,
        )

    print(json.dumps(out, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
