from __future__ import annotations

import logging
import random
import secrets
from threading import RLock

from .errors import NotFoundError
from .models import Room, Settings
from .validation import validate_settings


logger = logging.getLogger(__name__)

# No I/1 or O/0: codes get read aloud and typed by hand.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_CODE_LENGTH = 5


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


class RoomRegistry:
    def __init__(
        self,
        code_length: int = DEFAULT_CODE_LENGTH,
        alphabet: str = CODE_ALPHABET,
        rng: random.Random | None = None,
        max_teams: int | None = None,
    ) -> None:
        if code_length < 1 or not alphabet:
            raise ValueError("room codes need a positive length and a non-empty alphabet")
        self.code_length = code_length
        self.alphabet = alphabet
        self.max_teams = max_teams
        self._rng = rng or secrets.SystemRandom()
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return normalize_code(code) in self._rooms

    def _generate_code_locked(self) -> str:
        if len(self._rooms) >= len(self.alphabet) ** self.code_length:
            raise RuntimeError("room code space exhausted")
        while True:
            code = "".join(self._rng.choice(self.alphabet) for _ in range(self.code_length))
            if code not in self._rooms:
                return code
            logger.debug("room code collision on %s, resampling", code)

    def create_room(self, settings: Settings) -> Room:
        validate_settings(settings, max_teams=self.max_teams)
        with self._lock:
            code = self._generate_code_locked()
            room = Room(code=code, settings=settings)
            self._rooms[code] = room

        logger.info(
            "room %s created: %d teams, positions=%s, serpentine=%s",
            code,
            settings.team_count,
            settings.positions,
            settings.serpentine,
        )
        return room

    def get_room(self, code) -> Room | None:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def require_room(self, code) -> Room:
        room = self.get_room(code)
        if room is None:
            raise NotFoundError(normalize_code(code))
        return room

    def remove_room(self, code) -> bool:
        with self._lock:
            removed = self._rooms.pop(normalize_code(code), None)
        if removed is not None:
            logger.info("room %s removed", removed.code)
            return True
        return False

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())
