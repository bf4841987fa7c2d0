from flask import current_app, request
from flask_socketio import emit

from keys_arena import socketio


def _engine():
    return current_app.extensions['room_engine']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    emit('update-lobby', _engine().lobby_data())


def handle_disconnect(reason=None):
    _engine().disconnect(_get_sid())


def handle_join_room(room_id):
    _engine().join(_get_sid(), room_id)


def handle_leave_room(room_id):
    _engine().leave(_get_sid(), room_id)


def handle_player_score(data):
    if not isinstance(data, dict):
        return
    _engine().report_score(_get_sid(), data.get('roomId'), data.get('points'))


def handle_enemy_killed(data):
    if not isinstance(data, dict):
        return
    _engine().enemy_killed(_get_sid(), data.get('roomId'), data.get('enemyId'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind the room events on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('leave-room', handle_leave_room, namespace=namespace)
    socketio.on_event('player-score', handle_player_score, namespace=namespace)
    socketio.on_event('enemy-killed', handle_enemy_killed, namespace=namespace)
