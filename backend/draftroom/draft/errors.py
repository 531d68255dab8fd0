from __future__ import annotations


class DraftError(Exception):
    """Base class for every rejection surfaced to a requester.

    Raised before any room state is touched, so catching it never leaves a
    room half-updated.
    """

    code = "draft_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(DraftError):
    code = "invalid_payload"


class NotFoundError(DraftError):
    code = "room_not_found"

    def __init__(self, room_code: str) -> None:
        super().__init__(f'Draft room "{room_code}" not found.' if room_code else "Invalid room code provided.")
        self.room_code = room_code


class TurnError(DraftError):
    code = "not_your_turn"

    def __init__(self, message: str, team_id: int, next_team: int) -> None:
        super().__init__(message)
        self.team_id = team_id
        self.next_team = next_team


class DuplicateError(DraftError):
    code = "player_taken"

    def __init__(self, player_id) -> None:
        super().__init__("Player already selected.")
        self.player_id = player_id


class CapacityError(DraftError):
    code = "position_full"

    def __init__(self, team_name: str, position: str, required: int) -> None:
        super().__init__(f"All {position} slots ({required}) are already filled for {team_name}.")
        self.team_name = team_name
        self.position = position
        self.required = required


class EmptyHistoryError(DraftError):
    code = "nothing_to_undo"

    def __init__(self) -> None:
        super().__init__("No picks to undo.")

