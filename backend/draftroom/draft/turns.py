from __future__ import annotations

from typing import NamedTuple, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Pick, Settings


FORWARD = 1
BACKWARD = -1
DRAFT_COMPLETE = -1


class TurnPointer(NamedTuple):
    next_team: int
    direction: int


def total_slots(settings: "Settings") -> int:
    return settings.team_count * sum(settings.positions.values())


def next_turn(settings: "Settings", picks: Sequence["Pick"], prior_direction: int) -> TurnPointer:
    """Compute who picks after ``picks``.

    ``prior_direction`` is the direction that was active when the last pick
    was made. In serpentine order the team sitting on a round boundary picks
    twice in a row and the direction flips.
    """
    if not picks:
        return TurnPointer(0, FORWARD)

    team_count = settings.team_count
    last_team = picks[-1].team_id

    if len(picks) >= total_slots(settings):
        return TurnPointer(DRAFT_COMPLETE, prior_direction)

    at_boundary = (prior_direction == FORWARD and last_team == team_count - 1) or (
        prior_direction == BACKWARD and last_team == 0
    )

    if settings.serpentine and at_boundary:
        return TurnPointer(last_team, -prior_direction)

    return TurnPointer((last_team + prior_direction + team_count) % team_count, prior_direction)


def replay_turn(settings: "Settings", picks: Sequence["Pick"]) -> TurnPointer:
    """Rebuild the turn pointer from scratch for a whole pick history."""
    pointer = TurnPointer(0, FORWARD)
    for i in range(1, len(picks) + 1):
        pointer = next_turn(settings, picks[:i], pointer.direction)
    return pointer
