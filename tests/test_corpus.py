from __future__ import annotations

import pytest

from conftest import make_entry
from mindcare.domain.corpus import EmotionalCorpus, build_corpus, load_corpus
from mindcare.exceptions import CorpusLoadError


def test_shipped_corpus_loads_every_entry(corpus):
    assert len(corpus) == 60
    assert corpus.first().id == 1
    assert corpus.get(304).sample_input == "I see no way out"


def test_crisis_entries_always_use_intervention(corpus):
    crisis = corpus.crisis_entries()
    assert [e.id for e in crisis] == [300, 301, 302, 303, 304, 324, 325]
    assert all(e.support_type == "intervention" for e in crisis)


def test_categories_and_tags_keep_first_seen_order(corpus):
    categories = corpus.categories()
    assert categories[0] == "Academic Stress"
    assert categories[-1] == "Healing & Growth"
    assert len(categories) == len(set(categories)) == 12

    tags = corpus.tags()
    assert tags[:3] == ["overwhelmed", "pressure", "stress"]
    assert len(tags) == len(set(tags))


def test_filters(corpus):
    assert {e.category for e in corpus.by_category("Depression")} == {"Depression"}
    assert len(corpus.by_category("Depression")) == 5
    assert all(e.severity_level == "high" for e in corpus.by_severity("high"))
    assert corpus.by_category("Nope") == []


def test_first_with_tag(corpus):
    assert corpus.first_with_tag("loneliness").id == 53
    assert corpus.first_with_tag("no-such-tag") is None


def test_entries_are_immutable(corpus):
    entry = corpus.first()
    with pytest.raises(Exception):
        entry.response = "changed"
    assert isinstance(corpus.entries, tuple)


def test_crisis_entry_with_wrong_support_type_is_rejected():
    with pytest.raises(CorpusLoadError):
        EmotionalCorpus([make_entry(1, "x", severity="crisis", support="guidance")])


def test_duplicate_ids_are_rejected():
    with pytest.raises(CorpusLoadError):
        EmotionalCorpus([make_entry(1, "a"), make_entry(1, "b")])


def test_build_corpus_validates_fields():
    raw = {
        "id": 7,
        "category": "Test",
        "sample_input": "hello",
        "response": "hi",
        "coping_strategy": "breathe",
        "emotion_tags": ["calm", "calm", "ok"],
        "severity_level": "low",
        "support_type": "validation",
    }
    corpus = build_corpus([raw])
    assert corpus.first().emotion_tags == ("calm", "ok")

    with pytest.raises(CorpusLoadError):
        build_corpus([dict(raw, severity_level="extreme")])
    with pytest.raises(CorpusLoadError):
        build_corpus([dict(raw, response="  ")])
    with pytest.raises(CorpusLoadError):
        build_corpus([dict(raw, id="7")])


def test_empty_corpus_is_allowed():
    corpus = EmotionalCorpus([])
    assert len(corpus) == 0
    assert not corpus
    assert corpus.first() is None
    assert corpus.crisis_entries() == []


def test_load_corpus_errors(tmp_path):
    with pytest.raises(CorpusLoadError):
        load_corpus(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("emotional_corpus: [unclosed", encoding="utf-8")
    with pytest.raises(CorpusLoadError):
        load_corpus(bad)

    wrong = tmp_path / "wrong.yaml"
    wrong.write_text("something_else:\n  entries: []\n", encoding="utf-8")
    with pytest.raises(CorpusLoadError):
        load_corpus(wrong)
