from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..draft.errors import DraftError, NotFoundError
from ..draft.registry import RoomRegistry, normalize_code
from ..draft.validation import parse_pick, parse_settings
from . import events
from .broadcast import StateBroadcaster
from .lifecycle import ParticipantLifecycle


logger = logging.getLogger(__name__)


def _reject(event: str, err: DraftError) -> dict:
    logger.info("%s rejected for %s: %s", event, request.sid, err.message)
    emit(event, err.to_payload())
    return {"ok": False, **err.to_payload()}


def register_socketio_handlers(
    socketio: SocketIO,
    registry: RoomRegistry,
    lifecycle: ParticipantLifecycle,
) -> None:
    broadcaster = StateBroadcaster(socketio)

    def _room_from(payload: dict):
        room_code = normalize_code(payload.get("roomCode"))
        if not room_code:
            raise NotFoundError(room_code)
        return registry.require_room(room_code)

    @socketio.on(events.START)
    def draft_start(data):
        try:
            settings = parse_settings(data, max_teams=registry.max_teams)
            room = registry.create_room(settings)
        except DraftError as err:
            return _reject(events.ERROR, err)

        join_room(room.code)
        with room.lock:
            lifecycle.join(room, request.sid)
            broadcaster.started(room, to=request.sid)
        return {"ok": True, "roomCode": room.code}

    @socketio.on(events.JOIN)
    def draft_join(data):
        payload = data if isinstance(data, dict) else {}
        try:
            room = _room_from(payload)
            with room.lock:
                lifecycle.join(room, request.sid)
                join_room(room.code)
                broadcaster.send_state(room, to=request.sid)
                broadcaster.broadcast_members(room, skip_sid=request.sid)
        except DraftError as err:
            return _reject(events.JOIN_ERROR, err)
        return {"ok": True, "roomCode": room.code}

    @socketio.on(events.PICK)
    def draft_pick(data):
        payload = data if isinstance(data, dict) else {}
        try:
            room = _room_from(payload)
            pick = parse_pick(payload.get("pick"))
            with room.lock:
                room.apply_pick(pick)
                logger.info(
                    "room %s: team %d took %s (%s), next team %d",
                    room.code,
                    pick.team_id,
                    pick.player_name,
                    pick.position,
                    room.turn.next_team,
                )
                broadcaster.safe_broadcast_state(room)
        except DraftError as err:
            return _reject(events.PICK_ERROR, err)
        return {"ok": True}

    @socketio.on(events.UNDO)
    def draft_undo(data):
        payload = data if isinstance(data, dict) else {}
        try:
            room = _room_from(payload)
            with room.lock:
                undone = room.undo()
                logger.info("room %s: undid %s, next team %d", room.code, undone.player_name, room.turn.next_team)
                broadcaster.safe_broadcast_state(room)
        except DraftError as err:
            return _reject(events.ERROR, err)
        return {"ok": True}

    @socketio.on(events.RENAME_TEAM)
    def draft_rename_team(data):
        payload = data if isinstance(data, dict) else {}
        team_id: Any = payload.get("teamId")
        try:
            room = _room_from(payload)
            with room.lock:
                name = room.rename_team(team_id, payload.get("name"))
                logger.info("room %s: team %s renamed to %r", room.code, team_id, name)
                broadcaster.safe_broadcast_state(room)
        except DraftError as err:
            return _reject(events.ERROR, err)
        return {"ok": True, "name": name}

    @socketio.on(events.LEAVE)
    def draft_leave(data):
        payload = data if isinstance(data, dict) else {}
        room_code = normalize_code(payload.get("roomCode"))
        if not room_code:
            return {"ok": False}

        leave_room(room_code)
        room = lifecycle.leave(room_code, request.sid)
        if room is None:
            return {"ok": False}

        with room.lock:
            if not room.is_empty:
                broadcaster.broadcast_members(room)
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.info("%s disconnected (%s)", request.sid, reason)
        for room in lifecycle.disconnect(request.sid):
            with room.lock:
                if not room.is_empty:
                    broadcaster.broadcast_members(room)
