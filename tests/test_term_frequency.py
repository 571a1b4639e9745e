import pytest

from kbsearch.adapters.embedding.term_frequency import TermFrequencyEmbedder, tokenize


def test_tokenize_lowercases_and_drops_punctuation():
    assert tokenize("Health, LIFE & auto-insurance!!") == ["health", "life", "auto", "insurance"]


def test_tokenize_keeps_digits_and_underscores():
    assert tokenize("Call 1-800 now_please") == ["call", "1", "800", "now_please"]


def test_embed_builds_first_seen_vocabulary_and_frequencies():
    e = TermFrequencyEmbedder().embed("Insurance for you, insurance for me")
    assert e.vocabulary == ("insurance", "for", "you", "me")
    assert e.vector == pytest.approx((2 / 6, 2 / 6, 1 / 6, 1 / 6))
    assert len(e.vector) == len(e.vocabulary)


def test_embed_is_deterministic():
    embedder = TermFrequencyEmbedder()
    text = "Auto insurance for your car, and your other car."
    assert embedder.embed(text) == embedder.embed(text)


@pytest.mark.parametrize("text", ["", "   ", "?!... ---"])
def test_embed_without_tokens_is_empty(text):
    e = TermFrequencyEmbedder().embed(text)
    assert e.vector == ()
    assert e.vocabulary == ()


def test_self_similarity_is_one():
    embedder = TermFrequencyEmbedder()
    e = embedder.embed("life insurance for family and family friends")
    assert embedder.similarity(e, e) == pytest.approx(1.0)


def test_disjoint_texts_score_zero():
    embedder = TermFrequencyEmbedder()
    assert embedder.similarity(embedder.embed("health plans"), embedder.embed("auto car")) == 0.0


def test_restore_rebuilds_vocabulary_from_text():
    embedder = TermFrequencyEmbedder()
    original = embedder.embed("home insurance protects your home")
    restored = embedder.restore("home insurance protects your home", list(original.vector))
    assert restored == original


def test_restore_rejects_vector_that_does_not_fit_text():
    with pytest.raises(ValueError):
        TermFrequencyEmbedder().restore("two words", [1.0])
