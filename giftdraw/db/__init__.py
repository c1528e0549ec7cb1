from giftdraw.db.models import ActiveDraw, Base, Draw, DrawAssignment
from giftdraw.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "ActiveDraw",
    "Base",
    "Draw",
    "DrawAssignment",
    "SessionLocal",
    "get_session",
    "init_engine",
]
