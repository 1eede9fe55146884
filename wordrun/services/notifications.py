"""
Notification sinks for room events.

The services only call ``notify(room_id, event)``; delivery belongs to the
sink (Socket.IO in the running server, see ``websocket.notifier``).
"""

import logging

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Sink used when no real-time transport is attached."""

    def notify(self, room_id: str, event) -> None:
        logger.debug(f"Room {room_id} event {event.kind}: {event.to_payload()}")
