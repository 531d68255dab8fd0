from __future__ import annotations

# Client -> server
START = "draft:start"
JOIN = "draft:join"
PICK = "draft:pick"
UNDO = "draft:undo"
RENAME_TEAM = "draft:rename_team"
LEAVE = "draft:leave"

# Server -> client
STARTED = "draft:started"
STATE = "draft:state"
MEMBERS = "draft:members"

ERROR = "draft:error"
JOIN_ERROR = "draft:join_error"
PICK_ERROR = "draft:pick_error"
