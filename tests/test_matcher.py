from __future__ import annotations

from conftest import make_entry
from mindcare.domain.matcher import find_similar, rank_entries, score_entry


def test_score_components(small_corpus):
    pressure = small_corpus.get(1)
    # phrase (10) + token (3) + tag 'pressure' (2)
    assert score_entry(pressure, "pressure") == 15
    assert score_entry(small_corpus.get(2), "exams") == 15
    assert score_entry(pressure, "exams") == 0


def test_whole_sample_inside_input_counts_as_phrase(small_corpus):
    entry = small_corpus.get(4)
    assert score_entry(entry, "honestly nobody gets it at all") >= 10


def test_short_tokens_are_ignored():
    entry = make_entry(1, "go to it", ("ok",))
    # 'go', 'to', 'it' are shorter than 3 characters
    assert score_entry(entry, "it go") == 0


def test_empty_text_scores_zero(small_corpus):
    assert all(score_entry(e, "") == 0 for e in small_corpus)
    assert all(score_entry(e, "   ") == 0 for e in small_corpus)
    assert find_similar(small_corpus, "") == []


def test_find_similar_ranks_best_first(small_corpus):
    assert [e.id for e in find_similar(small_corpus, "scared exams")] == [2]
    assert [e.id for e in find_similar(small_corpus, "I see no way out")][0] == 5


def test_no_match_returns_empty_list(small_corpus):
    assert find_similar(small_corpus, "zzz qqq") == []


def test_ties_keep_insertion_order():
    a = make_entry(1, "alpha", ("calm",))
    b = make_entry(2, "beta", ("calm",))
    assert [e.id for e in find_similar([a, b], "calm")] == [1, 2]
    assert [e.id for e in find_similar([b, a], "calm")] == [2, 1]
    assert [s for _, s in rank_entries([a, b], "calm")] == [2, 2]


def test_limit(corpus):
    assert len(find_similar(corpus, "I feel sad and lonely", limit=2)) <= 2
    assert find_similar(corpus, "I feel sad", limit=0) == []
