from __future__ import annotations

import random
import secrets
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

PARTICIPANT_COUNT = 13
DEFAULT_NODE_BUDGET = 200_000


class DrawConfigError(ValueError):
    pass


class WrongParticipantCount(DrawConfigError):
    def __init__(self, required: int, actual: int) -> None:
        super().__init__(f"You must enter exactly {required} participants.")
        self.required = required
        self.actual = actual


class UnknownParticipantReference(DrawConfigError):
    def __init__(self, participant_id: str) -> None:
        super().__init__("A restriction references a participant that does not exist.")
        self.participant_id = participant_id


class DuplicateParticipantId(DrawConfigError):
    def __init__(self, participant_id: str) -> None:
        super().__init__("Each participant must appear only once.")
        self.participant_id = participant_id


class DanglingReference(RuntimeError):
    pass


@dataclass(frozen=True)
class Participant:
    id: str
    name: str


@dataclass(frozen=True)
class Restriction:
    participant_id: str
    cannot_give_to: Tuple[str, ...]


@dataclass
class Assignment:
    giver: str
    receiver: str
    token: str
    accessed: bool = False


def generate_token() -> str:
    """Millisecond timestamp plus 12 url-safe random characters."""
    return f"{time.time_ns() // 1_000_000}-{secrets.token_urlsafe(9)}"


def validate_draw_config(
    participants: Sequence[Participant],
    restrictions: Iterable[Restriction],
    required_count: int = PARTICIPANT_COUNT,
) -> None:
    if len(participants) != required_count:
        raise WrongParticipantCount(required_count, len(participants))

    participant_ids: Set[str] = set()
    for participant in participants:
        if participant.id in participant_ids:
            raise DuplicateParticipantId(participant.id)
        participant_ids.add(participant.id)

    for restriction in restrictions:
        if restriction.participant_id not in participant_ids:
            raise UnknownParticipantReference(restriction.participant_id)
        for restricted_id in restriction.cannot_give_to:
            if restricted_id not in participant_ids:
                raise UnknownParticipantReference(restricted_id)


def forbidden_map(restrictions: Iterable[Restriction]) -> Dict[str, Set[str]]:
    # a later restriction for the same giver replaces the earlier one
    return {
        restriction.participant_id: set(restriction.cannot_give_to)
        for restriction in restrictions
    }


def search(
    participants: Sequence[Participant],
    restrictions: Iterable[Restriction],
    seed: Optional[int] = None,
    node_budget: int = DEFAULT_NODE_BUDGET,
) -> Optional[Dict[str, str]]:
    """Find a giver -> receiver mapping for one random giver order.

    Givers are shuffled once, then placed depth-first, trying receivers in
    the current order of the unclaimed pool and backtracking on dead ends.
    Only the receiver choice is backtracked, so a solvable configuration may
    still come back as ``None``; calling again draws a new order. ``None`` is
    also returned when more than ``node_budget`` tentative claims were made.
    """
    rng = random.Random(seed)
    givers = list(participants)
    rng.shuffle(givers)

    forbidden = forbidden_map(restrictions)
    # dict keeps insertion order; a released receiver goes back to the end
    available: Dict[str, None] = dict.fromkeys(participant.id for participant in participants)
    assignments: Dict[str, str] = {}
    visited = 0

    def is_allowed(giver_id: str, receiver_id: str) -> bool:
        if giver_id == receiver_id:
            return False
        return receiver_id not in forbidden.get(giver_id, ())

    if not givers:
        return assignments

    # one frame per placed giver: [candidate snapshot, next position]
    frames: List[List] = [[list(available), 0]]
    while frames:
        depth = len(frames) - 1
        frame = frames[-1]
        candidates, position = frame
        giver_id = givers[depth].id

        previous = assignments.pop(giver_id, None)
        if previous is not None:
            available[previous] = None

        while position < len(candidates) and not is_allowed(giver_id, candidates[position]):
            position += 1
        if position == len(candidates):
            frames.pop()
            continue

        visited += 1
        if visited > node_budget:
            return None

        receiver_id = candidates[position]
        frame[1] = position + 1
        assignments[giver_id] = receiver_id
        del available[receiver_id]

        if len(frames) == len(givers):
            return assignments
        frames.append([list(available), 0])
    return None


def materialize(
    mapping: Mapping[str, str],
    participants: Sequence[Participant],
) -> List[Assignment]:
    names = {participant.id: participant.name for participant in participants}
    issued: Set[str] = set()
    result: List[Assignment] = []

    for giver_id, receiver_id in mapping.items():
        if giver_id not in names:
            raise DanglingReference(f"Unknown giver id in assignment: {giver_id}")
        if receiver_id not in names:
            raise DanglingReference(f"Unknown receiver id in assignment: {receiver_id}")

        token = generate_token()
        while token in issued:
            token = generate_token()
        issued.add(token)

        result.append(
            Assignment(
                giver=names[giver_id],
                receiver=names[receiver_id],
                token=token,
                accessed=False,
            )
        )
    return result


def perform_draw(
    participants: Sequence[Participant],
    restrictions: Sequence[Restriction],
    required_count: int = PARTICIPANT_COUNT,
    seed: Optional[int] = None,
    node_budget: int = DEFAULT_NODE_BUDGET,
) -> Optional[List[Assignment]]:
    validate_draw_config(participants, restrictions, required_count)
    mapping = search(participants, restrictions, seed=seed, node_budget=node_budget)
    if mapping is None:
        return None
    return materialize(mapping, participants)
