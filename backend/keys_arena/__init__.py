import json

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Room pool and lifecycle engine live for the whole process
    from keys_arena.services.rooms import (
        BackgroundScheduler, ManualScheduler, RoomChannel, RoomEngine, RoomPool,
    )
    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = ManualScheduler()
    else:
        scheduler = BackgroundScheduler(socketio, logger=flask_app.logger)
    pool = RoomPool(
        size=int(flask_app.config.get('ROOM_COUNT', 10)),
        matchmaking_duration=int(flask_app.config.get('MATCHMAKING_DURATION_SEC', 30)),
    )
    channel = RoomChannel(socketio, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))
    flask_app.extensions['room_engine'] = RoomEngine(
        pool, channel, scheduler, config=flask_app.config, logger=flask_app.logger,
    )

    from keys_arena.routes import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from keys_arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('spawn-sample')
    @click.option('--count', default=5, show_default=True, help='Number of enemies to generate.')
    @click.option('--seed', type=int, default=None, help='Seed for a reproducible sample.')
    def spawn_sample_command(count, seed):
        """Prints sample enemies from the spawn generator, one JSON object per line."""
        import random
        from keys_arena.services.rooms import spawn_enemy
        rng = random.Random(seed)
        for _ in range(count):
            click.echo(json.dumps(spawn_enemy(rng), ensure_ascii=False))

    flask_app.cli.add_command(spawn_sample_command)

    return flask_app
