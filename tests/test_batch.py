from __future__ import annotations

import pandas as pd
import pytest
import yaml

from mindcare.exceptions import InputDataError
from mindcare.infra.output_repo import save_batch_report_yaml
from mindcare.usecases.analyze_batch import analyze_frame, detect_text_column, read_table


def test_detect_text_column():
    assert detect_text_column(["id", "Message", "date"]) == "Message"
    assert detect_text_column(["id", "how do you feel", "date"]) == "how do you feel"
    assert detect_text_column(["id", "date"]) is None


def test_analyze_frame():
    df = pd.DataFrame(
        {
            "student": ["a", "b", "c", "d"],
            "message": ["I feel so sad and down today", "", None, "I want to die"],
        }
    )
    report = analyze_frame(df)

    assert report["text_column"] == "message"
    assert report["processed"] == 2
    assert report["crisis_rows"] == [3]
    assert report["max_severity"] == "crisis"
    assert report["emotion_counts"] == {"sad": 1, "crisis": 1}
    assert report["rows"][0]["detected_emotion"] == "sad"
    assert report["rows"][1]["severity"] == "crisis"


def test_analyze_frame_language_column_and_limit():
    df = pd.DataFrame(
        {
            "text": ["मैं बहुत उदास हूं", "I am so angry and furious", "I feel sad"],
            "lang": ["hi", None, "en"],
        }
    )
    report = analyze_frame(df, language_col="lang", max_rows=2)
    assert report["processed"] == 2
    assert [r["language"] for r in report["rows"]] == ["hi", "en"]
    assert [r["detected_emotion"] for r in report["rows"]] == ["sad", "angry"]


def test_analyze_frame_missing_column():
    with pytest.raises(InputDataError):
        analyze_frame(pd.DataFrame({"id": [1]}))
    with pytest.raises(InputDataError):
        analyze_frame(pd.DataFrame({"text": ["x"]}), text_col="body")


def test_read_table(tmp_path):
    csv = tmp_path / "survey.csv"
    pd.DataFrame({"journal": ["I feel sad"]}).to_csv(csv, index=False)
    assert list(read_table(csv).columns) == ["journal"]

    with pytest.raises(InputDataError):
        read_table(tmp_path / "missing.csv")
    unsupported = tmp_path / "survey.json"
    unsupported.write_text("[]", encoding="utf-8")
    with pytest.raises(InputDataError):
        read_table(unsupported)


def test_report_is_saved_as_yaml(tmp_path):
    df = pd.DataFrame({"notes": ["I feel so sad and down today"]})
    report = analyze_frame(df)
    path = save_batch_report_yaml("survey.csv", report, tmp_path)

    assert path.name.startswith("batch_") and path.name.endswith("_survey.yaml")
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert loaded["processed"] == 1
    assert loaded["rows"][0]["row"] == 0
