import threading
from typing import Dict, List, Optional

# Roles in join-slot order
ELEMENTS = ["Fire", "Earth", "Air", "Water"]
ELEMENT_COLORS = {"Fire": "#ff4444", "Earth": "#66ff66", "Air": "#ccffff", "Water": "#44aaff"}

ROOM_CAPACITY = len(ELEMENTS)

STATUS_OPEN = 'open'
STATUS_WAITING = 'waiting'
STATUS_PLAYING = 'playing'

# Timer slots owned by a room
MATCHMAKING_TIMER = 'matchmaking'
ROUND_TIMER = 'round'
SPAWN_TIMER = 'spawn'
TIMER_SLOTS = (MATCHMAKING_TIMER, ROUND_TIMER, SPAWN_TIMER)


class Player:
    def __init__(self, sid: str, name: str):
        self.id = sid
        self.name = name
        self.color = ELEMENT_COLORS[name]
        self.score = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'score': self.score,
        }


class Room:
    """One matchmaking/game unit.

    ``status`` is what clients see. ``phase`` tracks where the room is inside
    ``playing`` (countdown, round, or the post-round hold) so timer callbacks
    and score reports can tell those apart.
    """

    def __init__(self, room_id: int, matchmaking_duration: int = 30):
        self.id = room_id
        self.matchmaking_duration = matchmaking_duration
        self.lock = threading.RLock()
        self.players: List[Player] = []
        self.timers: Dict[str, object] = {}
        self.status = STATUS_OPEN
        self.phase = 'idle'
        self.timer = matchmaking_duration
        self.countdown = 0
        self.game_time = 0

    @property
    def is_full(self) -> bool:
        return len(self.players) >= ROOM_CAPACITY

    def get_player(self, sid: str) -> Optional[Player]:
        for p in self.players:
            if p.id == sid:
                return p
        return None

    def next_role(self) -> Optional[str]:
        taken = {p.name for p in self.players}
        for name in ELEMENTS:
            if name not in taken:
                return name
        return None

    def players_dict(self):
        return [p.to_dict() for p in self.players]

    def to_lobby_dict(self):
        return {
            'id': self.id,
            'count': len(self.players),
            'status': self.status,
            'timeLeft': self.timer,
        }

    def to_dict(self):
        # Scheduler handles and the lock stay server-side
        return {
            'id': self.id,
            'players': self.players_dict(),
            'status': self.status,
            'timer': self.timer,
        }
