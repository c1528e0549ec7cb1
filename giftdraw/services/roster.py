from __future__ import annotations

import secrets
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from giftdraw.services.draw_engine import PARTICIPANT_COUNT, Participant, Restriction


class RosterError(ValueError):
    pass


def _participant_id() -> str:
    return f"p-{time.time_ns() // 1_000_000}-{secrets.token_hex(4)}"


class Roster:
    """Participants and restrictions being prepared for the next draw.

    Restrictions are keyed by giver: setting one for a giver that already has
    a restriction replaces its forbidden set instead of extending it.
    """

    def __init__(self, capacity: int = PARTICIPANT_COUNT, list_name: Optional[str] = None) -> None:
        self.capacity = capacity
        self.list_name = list_name
        self._participants: List[Participant] = []
        self._restrictions: Dict[str, Tuple[str, ...]] = {}

    @property
    def participants(self) -> List[Participant]:
        return list(self._participants)

    @property
    def restrictions(self) -> List[Restriction]:
        return [
            Restriction(participant_id=giver_id, cannot_give_to=receivers)
            for giver_id, receivers in self._restrictions.items()
        ]

    @property
    def is_full(self) -> bool:
        return len(self._participants) >= self.capacity

    def get(self, participant_id: str) -> Optional[Participant]:
        for participant in self._participants:
            if participant.id == participant_id:
                return participant
        return None

    def participant_at(self, position: int) -> Participant:
        if position < 1 or position > len(self._participants):
            raise RosterError(f"There is no participant number {position}.")
        return self._participants[position - 1]

    def add_participant(self, name: str) -> Participant:
        name = (name or "").strip()
        if not name:
            raise RosterError("Please enter a name.")
        if self.is_full:
            raise RosterError(f"You already have {self.capacity} participants.")

        participant = Participant(id=_participant_id(), name=name)
        self._participants.append(participant)
        return participant

    def remove_participant(self, participant_id: str) -> bool:
        before = len(self._participants)
        self._participants = [p for p in self._participants if p.id != participant_id]
        if len(self._participants) == before:
            return False

        self._restrictions.pop(participant_id, None)
        for giver_id, receivers in list(self._restrictions.items()):
            remaining = tuple(r for r in receivers if r != participant_id)
            if remaining:
                self._restrictions[giver_id] = remaining
            else:
                del self._restrictions[giver_id]
        return True

    def set_restriction(self, participant_id: str, cannot_give_to: Iterable[str]) -> Restriction:
        if self.get(participant_id) is None:
            raise RosterError("Select a participant from the list.")

        receivers = tuple(dict.fromkeys(r for r in cannot_give_to if r != participant_id))
        if not receivers:
            raise RosterError("Select a participant and at least one restriction.")
        for receiver_id in receivers:
            if self.get(receiver_id) is None:
                raise RosterError("A restriction references a participant that does not exist.")

        self._restrictions[participant_id] = receivers
        return Restriction(participant_id=participant_id, cannot_give_to=receivers)

    def remove_restriction(self, participant_id: str) -> bool:
        return self._restrictions.pop(participant_id, None) is not None

    def forbidden_for(self, participant_id: str) -> Tuple[str, ...]:
        return self._restrictions.get(participant_id, ())

    def clear(self) -> None:
        self._participants = []
        self._restrictions = {}
        self.list_name = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "list_name": self.list_name,
            "participants": [{"id": p.id, "name": p.name} for p in self._participants],
            "restrictions": {
                giver_id: list(receivers) for giver_id, receivers in self._restrictions.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], capacity: int = PARTICIPANT_COUNT) -> "Roster":
        roster = cls(capacity=capacity)
        if not data:
            return roster
        roster.list_name = data.get("list_name")
        roster._participants = [
            Participant(id=item["id"], name=item["name"]) for item in data.get("participants", [])
        ]
        roster._restrictions = {
            giver_id: tuple(receivers)
            for giver_id, receivers in (data.get("restrictions") or {}).items()
        }
        return roster
