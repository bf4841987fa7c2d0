import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated; '*' allows any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    ROOM_COUNT = int(os.environ.get('ROOM_COUNT', '10'))
    # Room timers (seconds)
    MATCHMAKING_DURATION_SEC = int(os.environ.get('MATCHMAKING_DURATION_SEC', '30'))
    PREGAME_COUNTDOWN_TICKS = int(os.environ.get('PREGAME_COUNTDOWN_TICKS', '3'))
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '60'))
    SPAWN_INTERVAL_SEC = float(os.environ.get('SPAWN_INTERVAL_SEC', '0.9'))
    # Post-round hold before the room opens again
    GAME_OVER_HOLD_SEC = int(os.environ.get('GAME_OVER_HOLD_SEC', '10'))
    # Refresh the lobby every N matchmaking ticks
    LOBBY_HEARTBEAT_TICKS = int(os.environ.get('LOBBY_HEARTBEAT_TICKS', '5'))
    # Use real background timers even when TESTING is set
    ENABLE_SCHEDULER_IN_TESTS = os.environ.get('ENABLE_SCHEDULER_IN_TESTS', '').lower() in ('1', 'true', 'yes')
