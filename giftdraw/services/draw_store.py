from __future__ import annotations

import copy
import datetime
import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

from giftdraw.db import Draw, repo
from giftdraw.services.draw_engine import Assignment


@dataclass
class DrawResult:
    id: str
    assignments: List[Assignment]
    created_at: datetime.datetime
    name: Optional[str] = None

    def find(self, token: str) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.token == token:
                return assignment
        return None


class DrawStore(Protocol):
    def list_draws(self) -> List[DrawResult]:
        ...

    def append(self, draw: DrawResult) -> None:
        ...

    def get_active_id(self) -> Optional[str]:
        ...

    def set_active(self, draw_id: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def find_assignment(self, draw_id: str, token: str) -> Optional[Assignment]:
        ...

    def claim_token(self, draw_id: str, token: str) -> bool:
        """Flip ``accessed`` for the token; False if unknown or already accessed."""
        ...


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


class MemoryDrawStore:
    def __init__(self) -> None:
        self._draws: List[DrawResult] = []
        self._active_id: Optional[str] = None
        self._lock = threading.Lock()

    def list_draws(self) -> List[DrawResult]:
        with self._lock:
            ordered = sorted(self._draws, key=lambda draw: (_as_utc(draw.created_at), draw.id))
            return copy.deepcopy(ordered)

    def append(self, draw: DrawResult) -> None:
        with self._lock:
            if any(existing.id == draw.id for existing in self._draws):
                raise ValueError(f"Draw {draw.id} already exists.")
            self._draws.append(copy.deepcopy(draw))

    def get_active_id(self) -> Optional[str]:
        with self._lock:
            return self._active_id

    def set_active(self, draw_id: str) -> None:
        with self._lock:
            if not any(draw.id == draw_id for draw in self._draws):
                raise KeyError(draw_id)
            self._active_id = draw_id

    def clear(self) -> None:
        with self._lock:
            self._draws = []
            self._active_id = None

    def find_assignment(self, draw_id: str, token: str) -> Optional[Assignment]:
        with self._lock:
            for draw in self._draws:
                if draw.id == draw_id:
                    assignment = draw.find(token)
                    return copy.deepcopy(assignment) if assignment else None
            return None

    def claim_token(self, draw_id: str, token: str) -> bool:
        with self._lock:
            for draw in self._draws:
                if draw.id != draw_id:
                    continue
                assignment = draw.find(token)
                if assignment is None or assignment.accessed:
                    return False
                assignment.accessed = True
                return True
            return False


class SqlDrawStore:
    def __init__(self, session) -> None:
        self.session = session

    @staticmethod
    def _to_result(draw: Draw) -> DrawResult:
        return DrawResult(
            id=draw.id,
            name=draw.name,
            created_at=_as_utc(draw.created_at),
            assignments=[
                Assignment(
                    giver=row.giver,
                    receiver=row.receiver,
                    token=row.token,
                    accessed=bool(row.accessed),
                )
                for row in draw.assignments
            ],
        )

    def list_draws(self) -> List[DrawResult]:
        return [self._to_result(draw) for draw in repo.list_draws(self.session)]

    def append(self, draw: DrawResult) -> None:
        repo.create_draw(
            self.session,
            draw.id,
            draw.name,
            _as_utc(draw.created_at),
            [(a.giver, a.receiver, a.token, a.accessed) for a in draw.assignments],
        )

    def get_active_id(self) -> Optional[str]:
        return repo.get_active_draw_id(self.session)

    def set_active(self, draw_id: str) -> None:
        if repo.get_draw(self.session, draw_id) is None:
            raise KeyError(draw_id)
        repo.set_active_draw_id(self.session, draw_id)

    def clear(self) -> None:
        repo.clear_draws(self.session)

    def find_assignment(self, draw_id: str, token: str) -> Optional[Assignment]:
        row = repo.get_assignment_by_token(self.session, draw_id, token)
        if row is None:
            return None
        return Assignment(
            giver=row.giver,
            receiver=row.receiver,
            token=row.token,
            accessed=bool(row.accessed),
        )

    def claim_token(self, draw_id: str, token: str) -> bool:
        return repo.mark_assignment_accessed(self.session, draw_id, token)
