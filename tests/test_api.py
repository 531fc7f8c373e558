from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mindcare.app.main import app
from mindcare.infra import paths


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(paths, "MEMORY_DIR", tmp_path / "memory")
    return TestClient(app)


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["corpus_entries"] == 60
    assert "en" in body["languages"]


def test_analyze(client):
    res = client.post("/analyze", json={"text": "I feel so sad and down today", "language": "en"})
    body = res.json()
    assert body["status"] == "ok"
    assert body["result"]["detected_emotion"] == "sad"
    assert body["result"]["severity"] == "moderate"
    assert body["message"]
    assert body["complex_emotions"] == []


def test_analyze_with_history_and_without_message(client):
    res = client.post(
        "/analyze",
        json={"text": "I still feel sad", "history": [{"emotion": "sad"}], "compose": False},
    )
    body = res.json()
    assert body["result"]["suggested_response"].startswith("I see you're still struggling")
    assert body["message"] is None


def test_analyze_crisis(client):
    res = client.post("/analyze", json={"text": "I want to die"})
    body = res.json()
    assert body["result"]["is_crisis"] is True
    assert body["result"]["confidence"] == 0.95
    assert body["message"] == body["result"]["suggested_response"]


def test_analyze_empty_text(client):
    body = client.post("/analyze", json={"text": ""}).json()
    assert body["status"] == "ok"
    assert body["result"]["detected_emotion"] == "neutral"
    assert body["result"]["similar_entries"] == []


def test_complex(client):
    body = client.post("/complex", json={"text": "I hate myself and feel like a fraud"}).json()
    assert body["labels"] == ["anger-at-self", "impostor-syndrome"]


def test_similar(client):
    body = client.post("/similar", json={"text": "I can't handle the pressure", "limit": 2}).json()
    assert body["status"] == "ok"
    assert body["entries"][0]["id"] == 1
    assert len(body["entries"]) <= 2

    body = client.post("/similar", json={"text": "zzzz qqqq"}).json()
    assert body["entries"] == []


def test_similar_limit_is_validated(client):
    res = client.post("/similar", json={"text": "sad", "limit": 0})
    assert res.status_code == 422


def test_chat_uses_memory(client, tmp_path):
    payload = {"user_id": "student-1", "text": "I feel so sad and down today"}

    first = client.post("/chat", json=payload).json()
    assert first["status"] == "ok"
    assert first["result"]["analysis"]["detected_emotion"] == "sad"
    assert first["result"]["mood_pattern"] == "insufficient_data"
    assert (tmp_path / "memory" / "memory_student-1.yaml").exists()

    second = client.post("/chat", json=payload).json()
    assert second["result"]["reply"].startswith("I see you're still struggling")
    assert second["result"]["suggestion"]


def test_chat_mood_entries_seed_first_turn(client):
    payload = {
        "user_id": "student-2",
        "text": "I still feel sad",
        "mood_entries": [{"date": "2024-05-02", "overall": 2, "energy": 2, "stress": 3, "notes": "exam"}],
    }
    body = client.post("/chat", json=payload).json()
    assert body["status"] == "ok"
    assert body["result"]["reply"].startswith("I see you're still struggling")
    # only the chat turn is stored
    assert body["result"]["mood_pattern"] == "insufficient_data"


def test_chat_crisis_reply_has_hotlines(client):
    body = client.post("/chat", json={"user_id": "u2", "text": "I want to die"}).json()
    assert body["result"]["analysis"]["is_crisis"] is True
    assert "988" in body["result"]["reply"]
    assert body["result"]["suggestion"].startswith("IMMEDIATE")


def test_chat_rejects_empty_text(client):
    body = client.post("/chat", json={"user_id": "u3", "text": "   "}).json()
    assert body["status"] == "error"
    assert body["error_type"] == "input_data_error"


def test_chat_rejects_missing_user(client):
    body = client.post("/chat", json={"user_id": "", "text": "hello"}).json()
    assert body["error_type"] == "input_data_error"
