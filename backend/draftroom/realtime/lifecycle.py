from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable

from ..draft.errors import NotFoundError
from ..draft.models import Room
from ..draft.registry import RoomRegistry, normalize_code


logger = logging.getLogger(__name__)

Spawn = Callable[..., Any]
Sleep = Callable[[float], Any]


class ParticipantLifecycle:
    """Tracks which connections sit in which rooms and reaps abandoned rooms.

    ``spawn`` and ``sleep`` are normally ``socketio.start_background_task`` and
    ``socketio.sleep``, so cleanup waits cooperate with whatever async mode the
    server runs in.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        spawn: Spawn,
        sleep: Sleep,
        leave_grace_sec: float = 600,
        disconnect_grace_sec: float = 60,
    ) -> None:
        self.registry = registry
        self.leave_grace_sec = leave_grace_sec
        self.disconnect_grace_sec = disconnect_grace_sec
        self._spawn = spawn
        self._sleep = sleep
        self._lock = RLock()
        self._memberships: dict[str, set[str]] = {}

    def rooms_of(self, socket_id: str) -> set[str]:
        with self._lock:
            return set(self._memberships.get(socket_id, ()))

    def join(self, room: Room, socket_id: str) -> bool:
        with room.lock:
            if self.registry.get_room(room.code) is not room:
                raise NotFoundError(room.code)
            added = room.add_participant(socket_id)
        with self._lock:
            self._memberships.setdefault(socket_id, set()).add(room.code)
        if added:
            logger.info("room %s: %s joined (%d connected)", room.code, socket_id, len(room.participants))
        return added

    def leave(self, code: str, socket_id: str) -> Room | None:
        """Explicit leave: the room survives ``leave_grace_sec`` once empty."""
        room = self.registry.get_room(code)
        self._forget(socket_id, normalize_code(code))
        if room is None:
            return None
        self._detach(room, socket_id, self.leave_grace_sec)
        return room

    def disconnect(self, socket_id: str) -> list[Room]:
        """Connection dropped: detach from every room, short grace period."""
        with self._lock:
            codes = self._memberships.pop(socket_id, set())

        rooms = []
        for code in sorted(codes):
            room = self.registry.get_room(code)
            if room is None:
                continue
            self._detach(room, socket_id, self.disconnect_grace_sec)
            rooms.append(room)
        return rooms

    def _forget(self, socket_id: str, code: str) -> None:
        with self._lock:
            codes = self._memberships.get(socket_id)
            if codes is None:
                return
            codes.discard(code)
            if not codes:
                del self._memberships[socket_id]

    def _detach(self, room: Room, socket_id: str, grace_sec: float) -> None:
        with room.lock:
            if not room.remove_participant(socket_id):
                return
            logger.info("room %s: %s left (%d connected)", room.code, socket_id, len(room.participants))
            if room.is_empty:
                self._schedule_cleanup(room.code, room.membership_version, grace_sec)

    def _schedule_cleanup(self, code: str, version: int, grace_sec: float) -> None:
        logger.info("room %s is empty, removing in %ss unless someone rejoins", code, grace_sec)
        self._spawn(self._cleanup_later, code, version, grace_sec)

    def _cleanup_later(self, code: str, version: int, grace_sec: float) -> None:
        self._sleep(grace_sec)
        self.reap(code, version)

    def reap(self, code: str, version: int) -> bool:
        """Remove the room only if nobody touched its membership since ``version``."""
        room = self.registry.get_room(code)
        if room is None:
            return False

        with room.lock:
            if not room.is_empty or room.membership_version != version:
                logger.info("room %s: cleanup aborted, membership changed", code)
                return False
            # Still under the room lock so a concurrent join cannot slip in between.
            return self.registry.remove_room(code)
