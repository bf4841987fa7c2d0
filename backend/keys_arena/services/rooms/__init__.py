"""Room domain services: pool, lifecycle engine, timers and spawning.

Socket handlers and HTTP routes import from here; transport concerns live
in ``RoomChannel`` so the lifecycle logic can be driven without a server.
"""

from .channel import RoomChannel
from .engine import RoomEngine
from .pool import RoomPool
from .scheduler import BackgroundScheduler, ManualScheduler, TimerHandle
from .spawner import spawn_enemy

__all__ = [
    'BackgroundScheduler',
    'ManualScheduler',
    'RoomChannel',
    'RoomEngine',
    'RoomPool',
    'TimerHandle',
    'spawn_enemy',
]
