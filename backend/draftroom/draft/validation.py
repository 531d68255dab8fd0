from __future__ import annotations

from typing import Any, Mapping, TYPE_CHECKING

from .errors import CapacityError, DuplicateError, TurnError, ValidationError
from .models import MAX_NAME_LENGTH, Pick, Settings, default_team_name
from .turns import DRAFT_COMPLETE

if TYPE_CHECKING:
    from .models import Room


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_team_names(raw: Any, team_count: int) -> list[str]:
    names = [default_team_name(i) for i in range(team_count)]
    if raw is None:
        return names

    if isinstance(raw, Mapping):
        items = raw.items()
    elif isinstance(raw, list):
        items = enumerate(raw)
    else:
        raise ValidationError("Team names must be a list or an index-keyed object.")

    for key, value in items:
        try:
            idx = int(key)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid team index {key!r} in team names.") from None
        if not 0 <= idx < team_count:
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValidationError(f"Team name for team {idx + 1} must be text.")
        name = value.strip()[:MAX_NAME_LENGTH]
        if name:
            names[idx] = name
    return names


def validate_settings(settings: Settings, max_teams: int | None = None) -> Settings:
    if not _is_int(settings.team_count) or settings.team_count < 1:
        raise ValidationError("Team count must be a whole number of at least 1.")
    if max_teams is not None and settings.team_count > max_teams:
        raise ValidationError(f"Team count cannot exceed {max_teams}.")

    if not settings.positions:
        raise ValidationError("At least one position must be configured.")
    for position, count in settings.positions.items():
        if not isinstance(position, str) or not position.strip():
            raise ValidationError("Position labels must be non-empty text.")
        if not _is_int(count) or count < 0:
            raise ValidationError(f"Invalid player count for position {position}.")
    if sum(settings.positions.values()) == 0:
        raise ValidationError("Total players per team cannot be zero.")

    if not _is_number(settings.salary_cap) or settings.salary_cap < 0:
        raise ValidationError("Salary cap must be a number of at least 0.")

    return settings


def parse_settings(payload: Any, max_teams: int | None = None) -> Settings:
    """Build validated :class:`Settings` from a ``draft:start`` payload.

    Expected keys: ``teamCount``, ``positions``, and optionally
    ``serpentine``, ``salaryCap`` and ``teamNames``.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid draft settings provided.")

    team_count = payload.get("teamCount")
    if not _is_int(team_count) or team_count < 1:
        raise ValidationError("Team count must be a whole number of at least 1.")

    positions = payload.get("positions")
    if not isinstance(positions, Mapping):
        raise ValidationError("Positions must map each position label to a player count.")

    serpentine = payload.get("serpentine", False)
    if not isinstance(serpentine, bool):
        raise ValidationError("Serpentine order flag must be true or false.")

    salary_cap = payload.get("salaryCap", 0)

    if max_teams is not None and team_count > max_teams:
        raise ValidationError(f"Team count cannot exceed {max_teams}.")

    settings = Settings(
        team_count=team_count,
        positions={(k.strip() if isinstance(k, str) else k): v for k, v in positions.items()},
        serpentine=serpentine,
        salary_cap=salary_cap,
        team_names=_parse_team_names(payload.get("teamNames"), team_count),
    )
    return validate_settings(settings, max_teams=max_teams)


def parse_pick(payload: Any) -> Pick:
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid pick data format.")

    player_id = payload.get("playerId")
    if not (_is_int(player_id) or (isinstance(player_id, str) and player_id.strip())):
        raise ValidationError("Invalid pick data format: playerId is required.")
    if isinstance(player_id, str):
        player_id = player_id.strip()

    player_name = payload.get("playerName")
    if not isinstance(player_name, str) or not player_name.strip():
        raise ValidationError("Invalid pick data format: playerName is required.")

    salary = payload.get("salary")
    if not _is_number(salary):
        raise ValidationError("Invalid pick data format: salary must be a number.")

    position = payload.get("position")
    if not isinstance(position, str) or not position.strip():
        raise ValidationError("Invalid pick data format: position is required.")

    team_id = payload.get("teamId")
    if not _is_int(team_id) or team_id < 0:
        raise ValidationError("Invalid pick data format: teamId must be a team index.")

    metadata = payload.get("metadata")
    if metadata is None:
        metadata = {}
    elif not isinstance(metadata, Mapping):
        raise ValidationError("Invalid pick data format: metadata must be an object.")

    return Pick(
        player_id=player_id,
        player_name=player_name.strip(),
        salary=salary,
        position=position.strip(),
        team_id=team_id,
        metadata=dict(metadata),
    )


def validate_pick(room: "Room", pick: Pick) -> None:
    """Run the acceptance checks for ``pick`` against ``room``.

    Checks run in a fixed order and stop at the first failure: turn,
    duplicate player, known position, then remaining capacity.
    """
    next_team = room.turn.next_team
    if next_team == DRAFT_COMPLETE:
        raise TurnError(
            "The draft is complete; no more picks can be made.",
            team_id=pick.team_id,
            next_team=next_team,
        )
    if pick.team_id != next_team:
        message = (
            f"It's not {room.settings.team_name(pick.team_id)}'s turn; "
            f"{room.settings.team_name(next_team)} is on the clock."
        )
        raise TurnError(message, team_id=pick.team_id, next_team=next_team)

    if pick.player_key in room.selected_player_ids:
        raise DuplicateError(pick.player_id)

    required = room.settings.positions.get(pick.position)
    if required is None:
        raise ValidationError(f"Invalid player position {pick.position!r}.")

    if room.count_picks(pick.team_id, pick.position) >= required:
        raise CapacityError(room.settings.team_name(pick.team_id), pick.position, required)
