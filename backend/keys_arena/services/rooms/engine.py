import logging
import random
from typing import Callable, Mapping, Optional

from keys_arena.models import (
    MATCHMAKING_TIMER,
    ROUND_TIMER,
    SPAWN_TIMER,
    STATUS_OPEN,
    STATUS_PLAYING,
    STATUS_WAITING,
    TIMER_SLOTS,
    Player,
    Room,
)
from .channel import RoomChannel
from .pool import RoomPool
from .spawner import spawn_enemy

TICK_SEC = 1.0
GO_MARKER = "GO!"


class RoomEngine:
    """Drives every room through open -> waiting -> playing -> open.

    All mutations of a room, whether from a client event or a timer tick,
    happen while holding that room's lock. Timer callbacks re-check that
    their handle still owns its slot before touching the room, so a tick
    that fires after a reset is a no-op.
    """

    def __init__(
        self,
        pool: RoomPool,
        channel: RoomChannel,
        scheduler,
        config: Optional[Mapping] = None,
        logger: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None,
    ):
        config = config or {}
        self.pool = pool
        self.channel = channel
        self.scheduler = scheduler
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()
        self.matchmaking_duration = int(config.get('MATCHMAKING_DURATION_SEC', 30))
        self.countdown_ticks = int(config.get('PREGAME_COUNTDOWN_TICKS', 3))
        self.round_duration = int(config.get('ROUND_DURATION_SEC', 60))
        self.spawn_interval = float(config.get('SPAWN_INTERVAL_SEC', 0.9))
        self.game_over_hold = int(config.get('GAME_OVER_HOLD_SEC', 10))
        self.lobby_heartbeat_ticks = max(1, int(config.get('LOBBY_HEARTBEAT_TICKS', 5)))

    # ---- projections / broadcasts ----

    def lobby_data(self):
        return self.pool.lobby_data()

    def broadcast_lobby(self) -> None:
        self.channel.emit_all('update-lobby', self.lobby_data())

    def broadcast_room_state(self, room: Room) -> None:
        self.channel.emit_room(room.id, 'room-state', room.to_dict())

    # ---- client actions ----

    def join(self, sid: str, room_id) -> bool:
        room = self.pool.get(room_id)
        if room is None:
            self._skip('join', room_id, sid, 'unknown-room')
            return False

        # Membership check and seating happen under one pool-wide lock
        with self.pool.seat_lock:
            if any(other is not room for other in self.pool.rooms_for(sid)):
                self._skip('join', room.id, sid, 'seated-elsewhere')
                return False
            return self._seat(room, sid)

    def _seat(self, room: Room, sid: str) -> bool:
        with room.lock:
            if room.status == STATUS_PLAYING:
                self._skip('join', room.id, sid, 'playing')
                return False
            if room.is_full:
                self._skip('join', room.id, sid, 'full')
                return False
            if room.get_player(sid) is not None:
                self._skip('join', room.id, sid, 'already-joined')
                return False

            player = Player(sid, room.next_role())
            room.players.append(player)
            self.channel.join(sid, room.id)
            self.logger.info(f"[room-join] room={room.id} sid={sid} role={player.name} count={len(room.players)}")

            if len(room.players) == 1:
                room.status = STATUS_WAITING
                room.phase = 'matchmaking'
                room.timer = self.matchmaking_duration
                self._start_timer(room, MATCHMAKING_TIMER, TICK_SEC, self._matchmaking_tick)

            self.broadcast_lobby()
            self.broadcast_room_state(room)

            # A full room starts now rather than on the next matchmaking tick
            if room.is_full:
                self._start_countdown(room)
        return True

    def leave(self, sid: str, room_id) -> bool:
        room = self.pool.get(room_id)
        if room is None:
            self._skip('leave', room_id, sid, 'unknown-room')
            return False

        with room.lock:
            player = room.get_player(sid)
            if player is None:
                self._skip('leave', room.id, sid, 'not-member')
                return False
            room.players.remove(player)
            self.channel.leave(sid, room.id)
            self.logger.info(f"[room-leave] room={room.id} sid={sid} role={player.name} count={len(room.players)}")

            if not room.players:
                self.reset(room)

            self.broadcast_lobby()
            if room.players:
                self.broadcast_room_state(room)
        return True

    def disconnect(self, sid: str) -> int:
        """Remove ``sid`` from whatever room it sits in; returns rooms left."""
        left = 0
        for room in self.pool.rooms_for(sid):
            if self.leave(sid, room.id):
                left += 1
        return left

    def report_score(self, sid: str, room_id, points) -> bool:
        room = self.pool.get(room_id)
        if room is None:
            self._skip('score', room_id, sid, 'unknown-room')
            return False
        delta = _as_points(points)
        if delta is None:
            self._skip('score', room.id, sid, 'bad-points')
            return False

        with room.lock:
            # Countdown and post-round hold are also 'playing'; only the live
            # round scores, so game-over totals are final. Late hits are dropped.
            if room.status != STATUS_PLAYING or room.phase != 'round':
                self._skip('score', room.id, sid, 'not-in-round')
                return False
            player = room.get_player(sid)
            if player is None:
                self._skip('score', room.id, sid, 'not-member')
                return False
            player.score += delta
            self.channel.emit_room(room.id, 'score-update', room.players_dict())
        return True

    def enemy_killed(self, sid: str, room_id, enemy_id) -> bool:
        # Informational only; hits are not checked against spawned enemies
        room = self.pool.get(room_id)
        if room is None:
            self._skip('kill', room_id, sid, 'unknown-room')
            return False
        self.channel.emit_room(room.id, 'enemy-destroyed', {'enemyId': enemy_id, 'killerId': sid})
        return True

    # ---- lifecycle ----

    def reset(self, room: Room) -> None:
        with room.lock:
            self.cancel_all_timers(room)
            for player in room.players:
                self.channel.leave(player.id, room.id)
            room.players = []
            room.status = STATUS_OPEN
            room.phase = 'idle'
            room.timer = self.matchmaking_duration
            room.countdown = 0
            room.game_time = 0
            self.logger.info(f"[room-reset] room={room.id}")

    def cancel_all_timers(self, room: Room) -> None:
        for slot in TIMER_SLOTS:
            self._cancel_timer(room, slot)

    def _matchmaking_tick(self, room: Room) -> None:
        if room.is_full:
            self._start_countdown(room)
            return
        room.timer -= 1
        self.channel.emit_room(room.id, 'timer-update', room.timer)
        if room.timer % self.lobby_heartbeat_ticks == 0:
            self.broadcast_lobby()
        if room.timer <= 0:
            self._start_countdown(room)

    def _start_countdown(self, room: Room) -> None:
        self._cancel_timer(room, MATCHMAKING_TIMER)
        room.status = STATUS_PLAYING
        room.phase = 'countdown'
        room.countdown = self.countdown_ticks
        self.logger.info(f"[countdown-start] room={room.id} players={len(room.players)} timer={room.timer}")
        self.broadcast_lobby()
        self.channel.emit_room(room.id, 'start-sequence', room.countdown)
        self._start_timer(room, MATCHMAKING_TIMER, TICK_SEC, self._countdown_tick)

    def _countdown_tick(self, room: Room) -> None:
        room.countdown -= 1
        if room.countdown > 0:
            self.channel.emit_room(room.id, 'start-sequence', room.countdown)
            return
        self._cancel_timer(room, MATCHMAKING_TIMER)
        self.channel.emit_room(room.id, 'start-sequence', GO_MARKER)
        self._start_round(room)

    def _start_round(self, room: Room) -> None:
        room.phase = 'round'
        room.game_time = self.round_duration
        self.logger.info(f"[round-start] room={room.id} players={len(room.players)} duration={self.round_duration}s")
        self.channel.emit_room(room.id, 'game-start', room.players_dict())
        self._start_timer(room, ROUND_TIMER, TICK_SEC, self._round_tick)
        self._start_timer(room, SPAWN_TIMER, self.spawn_interval, self._spawn_tick)

    def _round_tick(self, room: Room) -> None:
        room.game_time -= 1
        self.channel.emit_room(room.id, 'gametime-update', room.game_time)
        if room.game_time <= 0:
            self._end_round(room)

    def _spawn_tick(self, room: Room) -> None:
        self.channel.emit_room(room.id, 'spawn-enemy', spawn_enemy(self.rng))

    def _end_round(self, room: Room) -> None:
        self._cancel_timer(room, ROUND_TIMER)
        self._cancel_timer(room, SPAWN_TIMER)
        room.phase = 'finished'
        scores = ' '.join(f"{p.name}={p.score}" for p in room.players)
        self.logger.info(f"[round-end] room={room.id} scores: {scores}")
        self.channel.emit_room(room.id, 'game-over', room.players_dict())
        # Room stays 'playing' (not joinable) until the hold elapses
        self._start_timer(room, ROUND_TIMER, self.game_over_hold, self._finish_hold, repeat=False)

    def _finish_hold(self, room: Room) -> None:
        self.reset(room)
        self.broadcast_lobby()

    # ---- timer plumbing ----

    def _start_timer(self, room: Room, slot: str, interval: float, action: Callable[[Room], None], repeat: bool = True):
        """Put a new timer in ``slot``, replacing whatever was there.

        Must be called with ``room.lock`` held.
        """
        self._cancel_timer(room, slot)

        def _tick(handle):
            with room.lock:
                if handle.cancelled or room.timers.get(slot) is not handle:
                    return
                action(room)

        schedule = self.scheduler.call_every if repeat else self.scheduler.call_later
        handle = schedule(interval, _tick, name=f"room-{room.id}:{slot}")
        room.timers[slot] = handle
        return handle

    def _cancel_timer(self, room: Room, slot: str) -> None:
        handle = room.timers.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def _skip(self, action: str, room_id, sid: str, reason: str) -> None:
        self.logger.debug(f"[{action}-skip] room={room_id} sid={sid} reason={reason}")


def _as_points(points) -> Optional[int]:
    # The amount is trusted; only its type and sign are checked so scores
    # never decrease within a round.
    if isinstance(points, bool):
        return None
    if isinstance(points, float):
        if not points.is_integer():
            return None
        points = int(points)
    if not isinstance(points, int) or points <= 0:
        return None
    return points
