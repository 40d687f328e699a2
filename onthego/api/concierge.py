"""AI dining concierge for OnTheGo.

Asks an OpenAI chat model for three business-dining recommendations at a
destination, optionally grounded in the restaurants currently listed in
the sidebar.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from onthego.api.config import get_concierge_config, get_openai_api_key

logger = logging.getLogger(__name__)

RECOMMENDATION_FIELDS = (
    "rank", "name", "cuisineType", "priceRange", "rating", "address",
    "description", "whyBusinessMeal", "mustTry", "reservationTip",
    "openTableUrl", "resyUrl", "googleMapsUrl",
)

DEFAULT_MESSAGE = "Here are my top picks for your business dining experience:"

_client: OpenAI | None = None


class ConciergeError(Exception):
    """The concierge could not produce recommendations."""


def _get_client() -> OpenAI:
    global _client
    if _client is None:
        try:
            _client = OpenAI(api_key=get_openai_api_key())
        except ValueError as exc:
            raise ConciergeError("OpenAI API key not configured") from exc
    return _client


# ---------------------------------------------------------------------------
# Prompt construction helpers
# ---------------------------------------------------------------------------

def _summarize_restaurants(restaurants: List[Dict[str, Any]], limit: int = 15) -> str:
    lines = []
    for r in restaurants[:limit]:
        categories = ", ".join(c.get("title", "") for c in r.get("categories") or [])
        address = (r.get("location") or {}).get("address1", "")
        lines.append(
            f"- {r.get('name', '')} ({categories}) rating {r.get('rating', '?')} "
            f"{r.get('price', '')} {address}".rstrip()
        )
    return "\n".join(lines)


def _build_prompt(destination: str, date: str, meal_type: str, party_size: int,
                  preferences: str, restaurants: List[Dict[str, Any]]) -> str:
    parts = [
        f"Recommend the top 3 restaurants in {destination} for a {meal_type} "
        f"with a party of {party_size}.",
    ]
    if date:
        parts.append(f"The meal is on {date}.")
    if preferences:
        parts.append(f"Preferences: {preferences}.")
    if restaurants:
        parts.append("Prefer these nearby options when they fit:\n"
                     + _summarize_restaurants(restaurants))
    parts.append(
        "Reply in strict JSON with the schema: "
        "{\"message\": <str>, \"recommendations\": [{"
        + ", ".join(f"\"{name}\": ..." for name in RECOMMENDATION_FIELDS)
        + "}]}"
    )
    return "\n".join(parts)


def _parse_response(content: str) -> Dict[str, Any]:
    """Extract message and recommendations from the model's raw JSON string."""
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse concierge response: %s", exc)
        raise ConciergeError("Concierge returned an invalid response") from exc

    recommendations = []
    for idx, rec in enumerate(payload.get("recommendations") or []):
        if not isinstance(rec, dict) or not rec.get("name"):
            continue
        cleaned = {field: rec.get(field) for field in RECOMMENDATION_FIELDS}
        cleaned["rank"] = rec.get("rank") or idx + 1
        recommendations.append(cleaned)

    return {
        "message": payload.get("message") or DEFAULT_MESSAGE,
        "recommendations": recommendations[:3],
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_recommendations(destination: str, date: str = "", meal_type: str = "business dinner",
                        party_size: int = 2, preferences: str = "",
                        restaurants: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Return ``{"message", "recommendations"}`` for a destination.

    Raises:
        ConciergeError: when OpenAI is not configured, fails, or replies
            with something that is not the expected JSON
    """
    cfg = get_concierge_config()
    messages = [
        {"role": "system", "content": "You are an expert corporate dining concierge."},
        {"role": "user", "content": _build_prompt(destination, date, meal_type, party_size,
                                                  preferences, restaurants or [])},
    ]

    logger.debug(
        "Calling OpenAI ChatCompletion: model=%s destination=%s party=%d",
        cfg["model"],
        destination,
        party_size,
    )

    client = _get_client()
    try:
        response = client.chat.completions.create(
            model=cfg["model"],
            messages=messages,
            temperature=cfg["temperature"],
            max_tokens=cfg["max_tokens"],
            response_format={"type": "json_object"},
        )
    except OpenAIError as exc:
        logger.error("OpenAI request failed: %s", exc)
        raise ConciergeError("Failed to contact OpenAI") from exc

    raw_content: str = response.choices[0].message.content or ""
    return _parse_response(raw_content)


__all__ = ["ConciergeError", "get_recommendations", "RECOMMENDATION_FIELDS"]
