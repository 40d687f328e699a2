import json
from types import SimpleNamespace
from unittest import mock

import pytest

from onthego.api import concierge
from onthego.api.concierge import ConciergeError, get_recommendations


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_client(monkeypatch):
    client = mock.Mock()
    monkeypatch.setattr(concierge, "_get_client", lambda: client)
    return client


def test_returns_top_three(openai_client):
    recs = [{"name": f"Place {i}", "cuisineType": "Italian"} for i in range(5)]
    openai_client.chat.completions.create.return_value = completion(
        json.dumps({"message": "Enjoy", "recommendations": recs}))

    result = get_recommendations("Boston, MA", date="2026-11-09", party_size=4)

    assert result["message"] == "Enjoy"
    assert [r["name"] for r in result["recommendations"]] == ["Place 0", "Place 1", "Place 2"]
    assert [r["rank"] for r in result["recommendations"]] == [1, 2, 3]
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert "party of 4" in kwargs["messages"][1]["content"]


def test_listed_restaurants_ground_the_prompt(openai_client):
    openai_client.chat.completions.create.return_value = completion('{"recommendations": []}')
    result = get_recommendations("San Francisco", restaurants=[
        {"name": "Sushi Paradise", "categories": [{"title": "Sushi"}], "rating": 4.5}])
    prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Sushi Paradise (Sushi)" in prompt
    assert result["message"] == concierge.DEFAULT_MESSAGE


def test_invalid_json_reply(openai_client):
    openai_client.chat.completions.create.return_value = completion("not json")
    with pytest.raises(ConciergeError):
        get_recommendations("Boston")


def test_missing_key(monkeypatch):
    monkeypatch.setattr(concierge, "_client", None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConciergeError, match="not configured"):
        get_recommendations("Boston")
