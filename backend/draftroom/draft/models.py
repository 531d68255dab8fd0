from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Union

from .errors import EmptyHistoryError, ValidationError
from .turns import DRAFT_COMPLETE, FORWARD, TurnPointer, next_turn, replay_turn, total_slots


PlayerId = Union[int, str]
MAX_NAME_LENGTH = 40


def default_team_name(team_id: int) -> str:
    return f"Team {team_id + 1}"


@dataclass
class Settings:
    team_count: int
    positions: dict[str, int]
    serpentine: bool = False
    salary_cap: float = 0
    # The only part of the settings that may change once the room exists.
    team_names: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        names = list(self.team_names)[: self.team_count]
        for team_id in range(len(names), self.team_count):
            names.append(default_team_name(team_id))
        self.team_names = names

    def team_name(self, team_id: int) -> str:
        if 0 <= team_id < len(self.team_names):
            return self.team_names[team_id]
        return default_team_name(team_id)


@dataclass(frozen=True)
class Pick:
    player_id: PlayerId
    player_name: str
    salary: float
    position: str
    team_id: int
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def player_key(self) -> str:
        # 5 and "5" name the same catalog player.
        return str(self.player_id)


@dataclass
class Room:
    code: str
    settings: Settings
    picks: list[Pick] = field(default_factory=list)
    selected_player_ids: set[str] = field(default_factory=set)
    turn: TurnPointer = TurnPointer(0, FORWARD)
    participants: set[str] = field(default_factory=set)
    membership_version: int = 0
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def is_complete(self) -> bool:
        return self.turn.next_team == DRAFT_COMPLETE

    @property
    def is_empty(self) -> bool:
        return not self.participants

    @property
    def total_slots(self) -> int:
        return total_slots(self.settings)

    def count_picks(self, team_id: int, position: str) -> int:
        return sum(1 for p in self.picks if p.team_id == team_id and p.position == position)

    def apply_pick(self, pick: Pick) -> Pick:
        # Imported here: validation depends on this module for its types.
        from .validation import validate_pick

        with self.lock:
            validate_pick(self, pick)
            self.picks.append(pick)
            self.selected_player_ids.add(pick.player_key)
            self.turn = next_turn(self.settings, self.picks, self.turn.direction)
            return pick

    def undo(self) -> Pick:
        with self.lock:
            if not self.picks:
                raise EmptyHistoryError()
            last = self.picks.pop()
            self.selected_player_ids.discard(last.player_key)
            self.turn = replay_turn(self.settings, self.picks)
            return last

    def rename_team(self, team_id: Any, name: Any) -> str:
        if isinstance(team_id, bool) or not isinstance(team_id, int):
            raise ValidationError("Invalid team name update request.")
        if team_id < 0 or team_id >= self.settings.team_count or not isinstance(name, str):
            raise ValidationError("Invalid team name update request.")

        final_name = name.strip()[:MAX_NAME_LENGTH].strip() or default_team_name(team_id)
        with self.lock:
            self.settings.team_names[team_id] = final_name
        return final_name

    def add_participant(self, socket_id: str) -> bool:
        with self.lock:
            if socket_id in self.participants:
                return False
            self.participants.add(socket_id)
            self.membership_version += 1
            return True

    def remove_participant(self, socket_id: str) -> bool:
        with self.lock:
            if socket_id not in self.participants:
                return False
            self.participants.discard(socket_id)
            self.membership_version += 1
            return True
