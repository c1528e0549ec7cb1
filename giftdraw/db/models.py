from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Draw(Base):
    __tablename__ = "draws"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    assignments = relationship(
        "DrawAssignment",
        back_populates="draw",
        cascade="all, delete-orphan",
        order_by="DrawAssignment.position",
    )

    def __repr__(self) -> str:
        return f"<Draw(id={self.id}, name={self.name}, created_at={self.created_at})>"


class DrawAssignment(Base):
    __tablename__ = "draw_assignments"

    id = Column(Integer, primary_key=True)
    draw_id = Column(String, ForeignKey("draws.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    giver = Column(String, nullable=False)
    receiver = Column(String, nullable=False)
    token = Column(String, nullable=False, unique=True, index=True)
    accessed = Column(Boolean, nullable=False, default=False)

    draw = relationship("Draw", back_populates="assignments")

    __table_args__ = (
        UniqueConstraint("draw_id", "position", name="uq_draw_assignments_draw_position"),
    )

    def __repr__(self) -> str:
        return (
            "<DrawAssignment(draw_id={0}, giver={1}, accessed={2})>"
        ).format(self.draw_id, self.giver, self.accessed)


class ActiveDraw(Base):
    __tablename__ = "active_draw"

    id = Column(Integer, primary_key=True)
    draw_id = Column(String, ForeignKey("draws.id", ondelete="SET NULL"), nullable=True)
