def room_channel_name(room_id: int) -> str:
    return f"room-{room_id}"


class RoomChannel:
    """Publish/subscribe adapter over the Socket.IO server.

    Uses ``socketio.emit`` and the server's room membership directly so it
    works from background timer tasks as well as from event handlers.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def join(self, sid: str, room_id: int) -> None:
        self.socketio.server.enter_room(sid, room_channel_name(room_id), namespace=self.namespace)

    def leave(self, sid: str, room_id: int) -> None:
        self.socketio.server.leave_room(sid, room_channel_name(room_id), namespace=self.namespace)

    def emit_all(self, event: str, data) -> None:
        self.socketio.emit(event, data, namespace=self.namespace)

    def emit_room(self, room_id: int, event: str, data) -> None:
        self.socketio.emit(event, data, to=room_channel_name(room_id), namespace=self.namespace)
