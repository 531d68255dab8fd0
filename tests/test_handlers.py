from __future__ import annotations

import time

import pytest

from draftroom.realtime import events
from draftroom.server import create_app


SETTINGS = {
    "teamCount": 2,
    "positions": {"F": 2},
    "serpentine": True,
    "salaryCap": 80_000_000,
    "teamNames": ["Leafs", "Habs"],
}


@pytest.fixture()
def app_and_socketio():
    return create_app(
        {
            "TESTING": True,
            "LOG_LEVEL": "WARNING",
            "LEAVE_GRACE_SEC": 0.05,
            "DISCONNECT_GRACE_SEC": 0.05,
        }
    )


@pytest.fixture()
def clients(app_and_socketio):
    app, socketio = app_and_socketio
    host = socketio.test_client(app)
    guest = socketio.test_client(app)
    yield host, guest
    for client in (host, guest):
        if client.is_connected():
            client.disconnect()


def _received(client, name: str) -> list[dict]:
    return [item["args"][0] for item in client.get_received() if item["name"] == name]


def _pick(player_id: int, team_id: int) -> dict:
    return {
        "playerId": player_id,
        "playerName": f"Player {player_id}",
        "salary": 1_000_000,
        "position": "F",
        "teamId": team_id,
        "metadata": {"club": "TOR"},
    }


def _start_and_join(host, guest) -> str:
    ack = host.emit(events.START, SETTINGS, callback=True)
    assert ack["ok"] is True
    code = ack["roomCode"]
    assert guest.emit(events.JOIN, {"roomCode": code.lower()}, callback=True)["ok"] is True
    host.get_received()
    guest.get_received()
    return code


def test_start_sends_initial_state_to_creator_only(clients) -> None:
    host, guest = clients
    ack = host.emit(events.START, SETTINGS, callback=True)

    started = _received(host, events.STARTED)
    assert len(started) == 1
    assert started[0]["roomCode"] == ack["roomCode"]
    state = started[0]["draftState"]
    assert state["nextTeam"] == 0
    assert state["direction"] == 1
    assert state["picks"] == []
    assert state["selectedPlayerIds"] == []
    assert state["settings"]["teamNames"] == ["Leafs", "Habs"]
    assert len(state["participants"]) == 1
    assert guest.get_received() == []


def test_join_sends_snapshot_and_notifies_members(clients) -> None:
    host, guest = clients
    code = host.emit(events.START, SETTINGS, callback=True)["roomCode"]
    host.get_received()

    ack = guest.emit(events.JOIN, {"roomCode": f" {code.lower()} "}, callback=True)
    assert ack == {"ok": True, "roomCode": code}

    snapshot = _received(guest, events.STATE)
    assert len(snapshot) == 1
    assert len(snapshot[0]["draftState"]["participants"]) == 2

    members = _received(host, events.MEMBERS)
    assert len(members) == 1
    assert len(members[0]["participants"]) == 2


def test_join_unknown_room_is_rejected(clients) -> None:
    _, guest = clients
    ack = guest.emit(events.JOIN, {"roomCode": "NOPE9"}, callback=True)
    assert ack["ok"] is False
    assert ack["error"] == "room_not_found"
    errors = _received(guest, events.JOIN_ERROR)
    assert errors[0]["error"] == "room_not_found"


def test_pick_broadcasts_full_state_to_everyone(clients) -> None:
    host, guest = clients
    code = _start_and_join(host, guest)

    ack = guest.emit(events.PICK, {"roomCode": code, "pick": _pick(97, 0)}, callback=True)
    assert ack == {"ok": True}

    for client in (host, guest):
        states = _received(client, events.STATE)
        assert len(states) == 1
        state = states[0]["draftState"]
        assert state["selectedPlayerIds"] == [97]
        assert state["picks"][0]["metadata"] == {"club": "TOR"}
        assert state["nextTeam"] == 1
        assert state["teams"][0]["salaryTotal"] == 1_000_000
        assert state["teams"][0]["remaining"] == {"F": 1}


def test_rejected_pick_only_reaches_requester(clients) -> None:
    host, guest = clients
    code = _start_and_join(host, guest)

    ack = guest.emit(events.PICK, {"roomCode": code, "pick": _pick(97, 1)}, callback=True)
    assert ack["ok"] is False
    assert ack["error"] == "not_your_turn"
    assert _received(guest, events.PICK_ERROR)[0]["error"] == "not_your_turn"
    assert host.get_received() == []

    host.emit(events.PICK, {"roomCode": code, "pick": _pick(97, 0)}, callback=True)
    ack = host.emit(events.PICK, {"roomCode": code, "pick": _pick(97, 1)}, callback=True)
    assert ack["error"] == "player_taken"

    ack = host.emit(events.PICK, {"roomCode": code, "pick": {"playerId": 5}}, callback=True)
    assert ack["error"] == "invalid_payload"

    ack = host.emit(events.PICK, {"roomCode": "ZZZZZ", "pick": _pick(5, 1)}, callback=True)
    assert ack["error"] == "room_not_found"


def test_full_serpentine_draft_then_undo(clients) -> None:
    host, guest = clients
    code = _start_and_join(host, guest)

    for player_id, team in enumerate([0, 1, 1, 0]):
        assert host.emit(events.PICK, {"roomCode": code, "pick": _pick(player_id, team)}, callback=True)["ok"]

    final = _received(guest, events.STATE)[-1]["draftState"]
    assert final["nextTeam"] == -1
    assert final["complete"] is True

    ack = host.emit(events.PICK, {"roomCode": code, "pick": _pick(10, 0)}, callback=True)
    assert ack["error"] == "not_your_turn"
    ack = host.emit(events.PICK, {"roomCode": code, "pick": _pick(10, -1)}, callback=True)
    assert ack["ok"] is False
    assert ack["error"] == "invalid_payload"

    assert guest.emit(events.UNDO, {"roomCode": code}, callback=True) == {"ok": True}
    state = _received(host, events.STATE)[-1]["draftState"]
    assert state["nextTeam"] == 0
    assert state["complete"] is False
    assert state["selectedPlayerIds"] == [0, 1, 2]


def test_undo_without_picks_is_rejected(clients) -> None:
    host, guest = clients
    code = _start_and_join(host, guest)
    ack = host.emit(events.UNDO, {"roomCode": code}, callback=True)
    assert ack["error"] == "nothing_to_undo"
    assert _received(host, events.ERROR)[0]["error"] == "nothing_to_undo"
    assert guest.get_received() == []


def test_rename_team_broadcasts_and_defaults_blank_names(clients) -> None:
    host, guest = clients
    code = _start_and_join(host, guest)

    ack = guest.emit(events.RENAME_TEAM, {"roomCode": code, "teamId": 1, "name": "Bruins"}, callback=True)
    assert ack == {"ok": True, "name": "Bruins"}
    assert _received(host, events.STATE)[0]["draftState"]["settings"]["teamNames"] == ["Leafs", "Bruins"]

    ack = guest.emit(events.RENAME_TEAM, {"roomCode": code, "teamId": 1, "name": ""}, callback=True)
    assert ack["name"] == "Team 2"

    ack = guest.emit(events.RENAME_TEAM, {"roomCode": code, "teamId": 5, "name": "X"}, callback=True)
    assert ack["error"] == "invalid_payload"


def test_leave_and_disconnect_update_remaining_members(app_and_socketio) -> None:
    app, socketio = app_and_socketio
    host = socketio.test_client(app)
    guest = socketio.test_client(app)
    third = socketio.test_client(app)

    code = host.emit(events.START, SETTINGS, callback=True)["roomCode"]
    guest.emit(events.JOIN, {"roomCode": code}, callback=True)
    third.emit(events.JOIN, {"roomCode": code}, callback=True)
    for client in (host, guest, third):
        client.get_received()

    assert guest.emit(events.LEAVE, {"roomCode": code}, callback=True) == {"ok": True}
    members = _received(host, events.MEMBERS)
    assert len(members[-1]["participants"]) == 2
    assert guest.get_received() == []

    third.disconnect()
    members = _received(host, events.MEMBERS)
    assert len(members[-1]["participants"]) == 1

    registry = app.extensions["draftroom.registry"]
    assert code in registry

    host.disconnect()
    guest.disconnect()


def test_start_with_invalid_settings_is_rejected(clients) -> None:
    host, _ = clients
    ack = host.emit(events.START, {"teamCount": 2, "positions": {"F": 0}}, callback=True)
    assert ack["ok"] is False
    assert ack["error"] == "invalid_payload"
    assert _received(host, events.ERROR)[0]["message"] == "Total players per team cannot be zero."


def test_abandoned_room_is_removed_after_grace(app_and_socketio) -> None:
    app, socketio = app_and_socketio
    host = socketio.test_client(app)
    code = host.emit(events.START, SETTINGS, callback=True)["roomCode"]
    registry = app.extensions["draftroom.registry"]
    assert code in registry

    host.disconnect()
    deadline = time.monotonic() + 5
    while code in registry and time.monotonic() < deadline:
        time.sleep(0.02)
    assert code not in registry
