# onthego/api/config.py
"""Configuration management for the OnTheGo backend and view orchestrator."""
import os
from dotenv import load_dotenv

load_dotenv()

YELP_SEARCH_URL = "https://api.yelp.com/v3/businesses/search"


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 3000))


def get_yelp_config():
    """Get Yelp Fusion configuration.

    The cache TTL is configured in milliseconds (``YELP_CACHE_TTL_MS``) to
    stay compatible with the deployment environment of the static front-end.
    """
    ttl_ms = int(os.getenv("YELP_CACHE_TTL_MS", "0") or 0)
    return {
        "api_key": os.getenv("YELP_API_KEY", ""),
        "api_url": os.getenv("YELP_API_URL", YELP_SEARCH_URL),
        "cache_ttl_seconds": round(ttl_ms / 1000) if ttl_ms > 0 else 300,
        "timeout_seconds": float(os.getenv("YELP_TIMEOUT_SECONDS", "10")),
    }


def get_openai_api_key():
    """Get OpenAI API key from environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY not set")
    return api_key


def get_concierge_config():
    """Get AI concierge configuration."""
    return {
        "model": os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1"),
        "temperature": float(os.getenv("CONCIERGE_TEMPERATURE", "0.7")),
        "max_tokens": int(os.getenv("CONCIERGE_MAX_TOKENS", "2048")),
    }


def get_google_maps_api_key():
    return os.getenv("GOOGLE_MAPS_API_KEY", "")


def get_map_config():
    """Get map and view orchestration configuration."""
    return {
        # Default map center (San Francisco)
        "default_lat": float(os.getenv("DEFAULT_LAT", "37.7749")),
        "default_lng": float(os.getenv("DEFAULT_LNG", "-122.4194")),
        "default_zoom": int(os.getenv("DEFAULT_ZOOM", "13")),

        "world_center": (20.0, 0.0),
        "world_zoom": int(os.getenv("WORLD_MAP_ZOOM", "2")),
        "world_min_zoom": int(os.getenv("WORLD_MAP_MIN_ZOOM", "2")),
        "world_max_zoom": int(os.getenv("WORLD_MAP_MAX_ZOOM", "18")),

        # Surfaces can only be resized once their container is laid out
        "resize_delay_seconds": float(os.getenv("MAP_RESIZE_DELAY_SECONDS", "0.1")),
        "fly_duration_seconds": float(os.getenv("MAP_FLY_DURATION_SECONDS", "1.0")),
        "geolocation_timeout_seconds": float(os.getenv("GEOLOCATION_TIMEOUT_SECONDS", "10")),

        "route_trip_clicks_to_local": os.getenv("ROUTE_TRIP_CLICKS_TO_LOCAL", "false").lower() in ("1", "true", "yes"),
        "enable_globe": os.getenv("ENABLE_GLOBE", "true").lower() in ("1", "true", "yes"),

        # Search parameters
        "search_radius": int(os.getenv("SEARCH_RADIUS", "5000")),
        "search_limit": int(os.getenv("SEARCH_LIMIT", "20")),
    }


def get_mock_api_delay():
    """Delay in seconds applied before serving sample restaurant data."""
    return float(os.getenv("MOCK_API_DELAY_SECONDS", "0.5"))


def get_trips_file():
    """Optional JSON file with ``past`` and ``upcoming`` trip lists."""
    return os.getenv("ONTHEGO_TRIPS_FILE", "")


def get_session_config():
    """Get orchestrator session configuration."""
    return {
        "session_timeout_seconds": int(os.getenv("SESSION_TIMEOUT_SECONDS", "1800")),
        "cleanup_interval_seconds": int(os.getenv("SESSION_CLEANUP_INTERVAL_SECONDS", "60")),
    }
