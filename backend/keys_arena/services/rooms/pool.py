import threading
from typing import List, Optional

from keys_arena.models import Room


class RoomPool:
    """Fixed set of rooms numbered 1..size, alive for the app's lifetime.

    ``seat_lock`` serializes seating across rooms so a connection can't be
    placed in two rooms at once. Take it before any room lock, never after.
    """

    def __init__(self, size: int = 10, matchmaking_duration: int = 30):
        self.rooms: List[Room] = [Room(i + 1, matchmaking_duration) for i in range(size)]
        self.seat_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.rooms)

    def __iter__(self):
        return iter(self.rooms)

    def get(self, room_id) -> Optional[Room]:
        """Return the room for a client-supplied id, or None if it isn't one."""
        if isinstance(room_id, bool):
            return None
        if isinstance(room_id, float) and not room_id.is_integer():
            return None
        try:
            idx = int(room_id)
        except (TypeError, ValueError):
            return None
        if 1 <= idx <= len(self.rooms):
            return self.rooms[idx - 1]
        return None

    def rooms_for(self, sid: str) -> List[Room]:
        return [room for room in self.rooms if room.get_player(sid) is not None]

    def lobby_data(self):
        return [room.to_lobby_dict() for room in self.rooms]
