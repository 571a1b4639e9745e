import json

import pytest

from kbsearch.adapters.ingestion.knowledge import (
    load_knowledge,
    load_knowledge_file,
    normalize_segment,
    normalize_segments,
)
from kbsearch.domain.errors import IngestionError


def test_normalize_extracted_shape():
    seg = normalize_segment({"id": 3, "section": "SERVICES", "content": "We insure homes.", "keywords": ["homes"]})
    assert seg.text == "We insure homes."
    assert dict(seg.metadata) == {"section": "SERVICES", "keywords": ["homes"], "id": 3}


def test_normalize_legacy_shape_maps_category_to_section():
    seg = normalize_segment({"id": 1, "category": "health", "text": "Health cover.", "keywords": ["health"]})
    assert seg.text == "Health cover."
    assert dict(seg.metadata) == {"section": "health", "keywords": ["health"], "id": 1}


def test_normalize_legacy_shape_with_nested_metadata():
    seg = normalize_segment({"text": "Auto cover.", "metadata": {"category": "auto", "source": "faq"}})
    assert dict(seg.metadata) == {"section": "auto", "source": "faq"}


def test_explicit_section_wins_over_category():
    seg = normalize_segment({"text": "x", "section": "A", "category": "B"})
    assert seg.metadata["section"] == "A"
    assert "category" not in seg.metadata


@pytest.mark.parametrize("raw", [{}, {"content": "   "}, {"text": ""}, {"text": 42}, {"section": "only"}])
def test_entries_without_text_are_skipped(raw):
    assert normalize_segment(raw) is None


def test_normalize_segments_tags_source_and_skips_junk():
    segs = normalize_segments([{"content": "a"}, "junk", {"text": "b", "metadata": {"source": "kept"}}], source="kb.json")
    assert [s.text for s in segs] == ["a", "b"]
    assert segs[0].metadata["source"] == "kb.json"
    assert segs[1].metadata["source"] == "kept"


def test_load_list_and_documents_wrappers(tmp_path):
    as_list = tmp_path / "list.json"
    as_list.write_text(json.dumps([{"content": "one"}, {"content": "two"}]), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"documents": [{"text": "three", "category": "c"}]}), encoding="utf-8")

    assert [s.text for s in load_knowledge_file(as_list)] == ["one", "two"]
    assert [s.metadata["section"] for s in load_knowledge_file(wrapped)] == ["c"]


def test_load_rejects_unexpected_shape(tmp_path):
    path = tmp_path / "odd.json"
    path.write_text(json.dumps({"items": []}), encoding="utf-8")
    with pytest.raises(IngestionError):
        load_knowledge_file(path)


def test_load_knowledge_falls_back_to_next_file(tmp_path):
    fallback = tmp_path / "chatbot_knowledge.json"
    fallback.write_text(json.dumps({"documents": [{"text": "fallback text"}]}), encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")

    segs = load_knowledge([tmp_path / "missing.json", broken, fallback])
    assert [s.text for s in segs] == ["fallback text"]


def test_load_knowledge_fails_when_nothing_loads(tmp_path):
    with pytest.raises(IngestionError):
        load_knowledge([tmp_path / "a.json", tmp_path / "b.json"])
    with pytest.raises(IngestionError):
        load_knowledge([])


def test_load_knowledge_fails_on_empty_file(tmp_path):
    empty = tmp_path / "empty.json"
    empty.write_text("[]", encoding="utf-8")
    with pytest.raises(IngestionError):
        load_knowledge([empty])
