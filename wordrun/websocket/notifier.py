"""
Socket.IO delivery of room events.
"""

import logging

from ..models.run import utc_now

logger = logging.getLogger(__name__)


def socket_room_name(room_id: str) -> str:
    return f"room:{room_id}"


class SocketIONotifier:
    """Emit every room event to the Socket.IO room watching that game room."""

    def __init__(self, socketio):
        self.socketio = socketio

    def notify(self, room_id: str, event) -> None:
        payload = {
            'room_id': room_id,
            **event.to_payload(),
            'timestamp': utc_now().isoformat(),
        }
        try:
            self.socketio.emit(event.kind, payload, room=socket_room_name(room_id))
        except Exception as e:
            # Game state is already saved at this point
            logger.error(f"Failed to emit {event.kind} to room {room_id}: {e}")
            return
        logger.debug(f"Event '{event.kind}' sent to room {room_id}")
