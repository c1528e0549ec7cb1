from giftdraw.services.draw_engine import (
    DanglingReference,
    DrawConfigError,
    DuplicateParticipantId,
    UnknownParticipantReference,
    WrongParticipantCount,
    perform_draw,
)
from giftdraw.services.roster import RosterError

__all__ = [
    "DanglingReference",
    "DrawConfigError",
    "DuplicateParticipantId",
    "UnknownParticipantReference",
    "WrongParticipantCount",
    "perform_draw",
    "RosterError",
]
