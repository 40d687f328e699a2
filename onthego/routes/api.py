# onthego/routes/api.py
"""HTTP routes and blueprint configuration."""

import logging
import os
from concurrent.futures import TimeoutError as FutureTimeoutError

from flask import Blueprint, jsonify, render_template, request

from onthego.api.concierge import ConciergeError, get_recommendations
from onthego.api.services.restaurant_service import restaurant_links
from onthego.api.services.trip_service import TripSelector
from onthego.api.yelp import (
    MISSING_KEY_MESSAGE,
    ValidationError,
    YelpAPIError,
    get_yelp_client,
    validate_search_request,
)

logger = logging.getLogger(__name__)

SURFACES = ("world", "local")
SESSION_CALL_TIMEOUT_SECONDS = 10


def create_api_blueprint(base_dir, get_manager):
    """Create and configure the OnTheGo blueprint.

    Args:
        base_dir: Absolute path to the application directory
        get_manager: Callable returning the orchestrator SessionManager

    Returns:
        Configured Flask Blueprint
    """
    api_bp = Blueprint(
        "onthego",
        __name__,
        template_folder=os.path.join(base_dir, 'templates'),
    )

    def _run_in_session(sid, action):
        future = get_manager().run(sid, action)
        if future is None:
            return None, (jsonify({"error": "Unknown session"}), 404)
        try:
            return future.result(timeout=SESSION_CALL_TIMEOUT_SECONDS), None
        except FutureTimeoutError:
            logger.error(f"Timed out waiting for session {sid}")
            return None, (jsonify({"error": "Session busy"}), 504)

    @api_bp.route("/")
    def index():
        """Main single page."""
        return render_template("index.html")

    @api_bp.route("/api/yelp-search", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def yelp_search():
        """Proxy a business search to Yelp with the server-side key."""
        if request.method != "POST":
            response = jsonify({"error": "Method not allowed"})
            response.headers["Allow"] = "POST"
            return response, 405

        client = get_yelp_client()
        if not client.configured:
            return jsonify({"error": MISSING_KEY_MESSAGE}), 500

        body = request.get_json(silent=True)
        if body is None and request.data:
            logger.warning(f"Invalid JSON body received for Yelp search request: "
                           f"{request.get_data(as_text=True)[:200]}")

        try:
            query = validate_search_request(body)
            data = client.search(query)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except YelpAPIError as e:
            if e.status is not None:
                return jsonify({"error": e.message, "status": e.status}), e.status
            return jsonify({"error": e.message}), 500

        response = jsonify(data)
        response.headers["Cache-Control"] = client.cache_control
        return response

    @api_bp.route("/api/concierge", methods=["POST"])
    def concierge():
        """Top three business-dining picks from the AI concierge."""
        data = request.get_json(silent=True) or {}
        destination = (data.get("destination") or "").strip()
        if not destination:
            return jsonify({"error": "destination is required"}), 400

        try:
            party_size = int(data.get("partySize") or 2)
        except (TypeError, ValueError):
            party_size = 2

        try:
            result = get_recommendations(
                destination=destination,
                date=(data.get("date") or "").strip(),
                meal_type=data.get("mealType") or "business dinner",
                party_size=party_size,
                preferences=(data.get("preferences") or "").strip(),
                restaurants=data.get("restaurants") or [],
            )
        except ConciergeError as e:
            logger.error(f"Concierge failed for {destination}: {e}")
            return jsonify({"error": str(e)}), 500
        return jsonify(result)

    @api_bp.route("/api/concierge/prefill")
    def concierge_prefill():
        """Destination and date from the session's active trip."""
        result, error = _run_in_session(request.args.get("sid", ""),
                                        lambda o: o.concierge_prefill())
        return error or jsonify(result)

    @api_bp.route("/api/trips")
    def trips():
        """Grouped trip options and the default selection."""
        repository = get_manager().repository
        selector = TripSelector(repository)
        default_trip = selector.default_trip()
        return jsonify({
            "groups": selector.build_options(),
            "default": selector.option_value(default_trip) if default_trip else None,
            "past": [t.to_dict() for t in repository.past],
            "upcoming": [t.to_dict() for t in repository.upcoming],
        })

    @api_bp.route("/api/links")
    def links():
        """Social, delivery and reservation search links for a restaurant."""
        name = (request.args.get("name") or "").strip()
        if not name:
            return jsonify({"error": "name is required"}), 400
        return jsonify(restaurant_links(name, request.args.get("city", "")))

    @api_bp.route("/maps/<surface>")
    def map_document(surface):
        """Current map document of a connected session."""
        if surface not in SURFACES:
            return jsonify({"error": f"Unknown surface: {surface}"}), 404

        html, error = _run_in_session(
            request.args.get("sid", ""),
            lambda o: (o.world if surface == "world" else o.local).render_html(),
        )
        if error:
            return error
        if not html:
            return jsonify({"error": f"{surface} map unavailable"}), 503
        return html, 200, {"Content-Type": "text/html; charset=utf-8"}

    @api_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "onthego"})

    return api_bp


__all__ = ['create_api_blueprint']
