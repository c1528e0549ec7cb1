from __future__ import annotations

import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, delete, select, update

from giftdraw.db.models import ActiveDraw, Draw, DrawAssignment

ACTIVE_DRAW_ROW_ID = 1


def list_draws(session) -> List[Draw]:
    return list(session.scalars(select(Draw).order_by(Draw.created_at, Draw.id)).all())


def get_draw(session, draw_id: str) -> Optional[Draw]:
    return session.scalar(select(Draw).where(Draw.id == draw_id))


def create_draw(
    session,
    draw_id: str,
    name: Optional[str],
    created_at: datetime.datetime,
    assignments: Iterable[Tuple[str, str, str, bool]],
) -> Draw:
    draw = Draw(id=draw_id, name=name, created_at=created_at)
    draw.assignments = [
        DrawAssignment(
            position=position,
            giver=giver,
            receiver=receiver,
            token=token,
            accessed=accessed,
        )
        for position, (giver, receiver, token, accessed) in enumerate(assignments)
    ]
    session.add(draw)
    session.flush()
    return draw


def get_active_draw_id(session) -> Optional[str]:
    row = session.get(ActiveDraw, ACTIVE_DRAW_ROW_ID)
    return row.draw_id if row else None


def set_active_draw_id(session, draw_id: Optional[str]) -> None:
    row = session.get(ActiveDraw, ACTIVE_DRAW_ROW_ID)
    if row:
        row.draw_id = draw_id
    else:
        session.add(ActiveDraw(id=ACTIVE_DRAW_ROW_ID, draw_id=draw_id))
    session.flush()


def get_assignment_by_token(session, draw_id: str, token: str) -> Optional[DrawAssignment]:
    return session.scalar(
        select(DrawAssignment).where(
            and_(DrawAssignment.draw_id == draw_id, DrawAssignment.token == token)
        )
    )


def mark_assignment_accessed(session, draw_id: str, token: str) -> bool:
    result = session.execute(
        update(DrawAssignment)
        .where(
            and_(
                DrawAssignment.draw_id == draw_id,
                DrawAssignment.token == token,
                DrawAssignment.accessed.is_(False),
            )
        )
        .values(accessed=True)
        .execution_options(synchronize_session=False)
    )
    session.expire_all()
    return (result.rowcount or 0) == 1


def clear_draws(session) -> None:
    session.execute(delete(ActiveDraw))
    session.execute(delete(DrawAssignment))
    session.execute(delete(Draw))
    session.expire_all()
