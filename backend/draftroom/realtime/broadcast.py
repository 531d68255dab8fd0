from __future__ import annotations

import logging

from flask_socketio import SocketIO

from ..draft.models import Pick, Room
from . import events


logger = logging.getLogger(__name__)


def pick_public_state(pick: Pick) -> dict:
    return {
        "playerId": pick.player_id,
        "playerName": pick.player_name,
        "salary": pick.salary,
        "position": pick.position,
        "teamId": pick.team_id,
        "metadata": dict(pick.metadata),
    }


def team_summaries(room: Room) -> list[dict]:
    settings = room.settings
    summaries = []
    for team_id in range(settings.team_count):
        team_picks = [p for p in room.picks if p.team_id == team_id]
        salary_total = sum(p.salary for p in team_picks)
        filled = {pos: 0 for pos in settings.positions}
        for p in team_picks:
            filled[p.position] = filled.get(p.position, 0) + 1
        summaries.append(
            {
                "teamId": team_id,
                "name": settings.team_name(team_id),
                "salaryTotal": salary_total,
                # Informational only; picks over the cap are still accepted.
                "capRemaining": settings.salary_cap - salary_total,
                "filled": filled,
                "remaining": {pos: max(0, need - filled.get(pos, 0)) for pos, need in settings.positions.items()},
            }
        )
    return summaries


def room_public_state(room: Room) -> dict:
    with room.lock:
        settings = room.settings
        picks = [pick_public_state(p) for p in room.picks]
        return {
            "roomCode": room.code,
            "settings": {
                "teamCount": settings.team_count,
                "positions": dict(settings.positions),
                "serpentine": settings.serpentine,
                "salaryCap": settings.salary_cap,
                "teamNames": list(settings.team_names),
            },
            "picks": picks,
            # Draft order rather than set order, so every client sees the same list.
            "selectedPlayerIds": [p["playerId"] for p in picks],
            "nextTeam": room.turn.next_team,
            "direction": room.turn.direction,
            "complete": room.is_complete,
            "totalSlots": room.total_slots,
            "participants": sorted(room.participants),
            "teams": team_summaries(room),
        }


class StateBroadcaster:
    """Pushes full room snapshots to Socket.IO rooms named after room codes."""

    def __init__(self, socketio: SocketIO) -> None:
        self.socketio = socketio

    def started(self, room: Room, to: str) -> None:
        self.socketio.emit(events.STARTED, {"roomCode": room.code, "draftState": room_public_state(room)}, to=to)

    def send_state(self, room: Room, to: str) -> None:
        self.socketio.emit(events.STATE, {"roomCode": room.code, "draftState": room_public_state(room)}, to=to)

    def broadcast_state(self, room: Room) -> None:
        self.send_state(room, to=room.code)

    def broadcast_members(self, room: Room, skip_sid: str | None = None) -> None:
        state = room_public_state(room)
        payload = {"roomCode": room.code, "participants": state["participants"], "draftState": state}
        self.socketio.emit(events.MEMBERS, payload, to=room.code, skip_sid=skip_sid)

    def safe_broadcast_state(self, room: Room) -> None:
        # The mutation is already committed; a failed push must not surface as a rejection.
        try:
            self.broadcast_state(room)
        except Exception:
            logger.exception("room %s: state broadcast failed", room.code)
