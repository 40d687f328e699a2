# onthego/routes/websocket/views.py
"""Browser interactions relayed to the connection's view orchestrator."""

import logging
import math

from flask import request

from onthego.api.models import TripKind
from onthego.views.location import UNAVAILABLE, LocationError

from .base import BaseWebSocketHandler

logger = logging.getLogger(__name__)


class ViewHandler(BaseWebSocketHandler):
    """Handles view toggles, trip selection, location and map clicks."""

    def _dispatch(self, event_name, action, reply=None):
        """Run ``action(orchestrator)`` on the view loop.

        Failures are logged and reported to the client as ``error``. When
        ``reply`` is given the action's result is emitted under that name.
        """
        sid = request.sid
        future = self.manager.run(sid, action)
        if future is None:
            self.handle_error("No active session", event_name)
            return

        def _done(f):
            error = f.exception()
            if error is not None:
                logger.error(f"[WS] {event_name} failed for {sid}: {error}")
                self.emit_to_client('error', {'message': str(error), 'event': event_name},
                                    room=sid)
            elif reply:
                self.emit_to_client(reply, f.result(), room=sid)

        future.add_done_callback(_done)

    def register_handlers(self):
        """Register view-related event handlers."""
        ns = self.namespace

        @self.socketio.on('toggle_view', namespace=ns)
        def handle_toggle_view():
            self.log_event('toggle_view')
            self._dispatch('toggle_view', lambda o: o.toggle_view())

        @self.socketio.on('show_travel_log', namespace=ns)
        def handle_show_travel_log():
            self.log_event('show_travel_log')
            self._dispatch('show_travel_log', lambda o: o.show_travel_log())

        @self.socketio.on('select_trip', namespace=ns)
        def handle_select_trip(data):
            self.log_event('select_trip', data)
            data = data or {}
            if data.get('value'):
                self._dispatch('select_trip', lambda o: o.select_trip_option(data['value']))
                return
            try:
                kind = TripKind(data.get('kind'))
            except ValueError:
                self.handle_error(f"Unknown trip kind: {data.get('kind')}", 'select_trip')
                return
            trip_id = str(data.get('id', ''))
            self._dispatch('select_trip', lambda o: o.select_trip(kind, trip_id))

        @self.socketio.on('request_location', namespace=ns)
        def handle_request_location():
            self.log_event('request_location')
            self._dispatch('request_location', lambda o: o.request_user_location())

        @self.socketio.on('location_result', namespace=ns)
        def handle_location_result(data):
            self.log_event('location_result')
            session = self.manager.get_session(request.sid)
            if session is None:
                return
            data = data or {}
            try:
                lat, lng = float(data['latitude']), float(data['longitude'])
                if not (math.isfinite(lat) and math.isfinite(lng)):
                    raise ValueError("non-finite coordinate")
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Malformed location result from {request.sid}: {data}")
                session.location_provider.reject(LocationError(UNAVAILABLE))
                return
            session.location_provider.resolve(lat, lng)

        @self.socketio.on('location_error', namespace=ns)
        def handle_location_error(data):
            self.log_event('location_error', data)
            session = self.manager.get_session(request.sid)
            if session is None:
                return
            session.location_provider.reject(
                LocationError.from_browser_code((data or {}).get('code')))

        @self.socketio.on('viewport_changed', namespace=ns)
        def handle_viewport_changed(data):
            data = data or {}
            self._dispatch('viewport_changed', lambda o: o.on_viewport_changed(
                data.get('latitude'), data.get('longitude'), data.get('zoom')))

        @self.socketio.on('search_area', namespace=ns)
        def handle_search_area():
            self.log_event('search_area')
            self._dispatch('search_area', lambda o: o.search_this_area())

        @self.socketio.on('restaurant_marker_clicked', namespace=ns)
        def handle_restaurant_marker_clicked(data):
            restaurant_id = str((data or {}).get('id', ''))
            self.log_event('restaurant_marker_clicked', restaurant_id)
            self._dispatch('restaurant_marker_clicked',
                           lambda o: o.on_restaurant_marker_clicked(restaurant_id))

        @self.socketio.on('restaurant_card_clicked', namespace=ns)
        def handle_restaurant_card_clicked(data):
            restaurant_id = str((data or {}).get('id', ''))
            self.log_event('restaurant_card_clicked', restaurant_id)
            self._dispatch('restaurant_card_clicked',
                           lambda o: o.on_restaurant_card_clicked(restaurant_id))

        @self.socketio.on('trip_marker_clicked', namespace=ns)
        def handle_trip_marker_clicked(data):
            data = data or {}
            trip_id = str(data.get('id', ''))
            is_past = bool(data.get('isPast'))
            self.log_event('trip_marker_clicked', data)
            self._dispatch('trip_marker_clicked',
                           lambda o: o.on_trip_marker_clicked(trip_id, is_past))

        @self.socketio.on('concierge_prefill', namespace=ns)
        def handle_concierge_prefill():
            self._dispatch('concierge_prefill', lambda o: o.concierge_prefill(),
                           reply='concierge_prefill')

        @self.socketio.on('get_state', namespace=ns)
        def handle_get_state():
            self._dispatch('get_state', lambda o: o.snapshot(), reply='page_state')
