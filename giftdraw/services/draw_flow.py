from __future__ import annotations

import datetime
import enum
import html
import secrets
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from giftdraw.services.draw_engine import (
    DEFAULT_NODE_BUDGET,
    Assignment,
    perform_draw,
)
from giftdraw.services.draw_store import DrawResult, DrawStore
from giftdraw.services.roster import Roster


class TokenStatus(str, enum.Enum):
    CONSUMED = "consumed"
    ALREADY_CONSUMED = "already_consumed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RevealResult:
    status: TokenStatus
    assignment: Optional[Assignment] = None


def new_draw_id() -> str:
    return f"draw-{time.time_ns() // 1_000_000}-{secrets.token_hex(3)}"


def save_draw_result(
    store: DrawStore,
    assignments: Sequence[Assignment],
    name: Optional[str] = None,
) -> DrawResult:
    draw = DrawResult(
        id=new_draw_id(),
        assignments=list(assignments),
        created_at=datetime.datetime.now(datetime.timezone.utc),
        name=name or None,
    )
    store.append(draw)
    store.set_active(draw.id)
    logger.bind(draw_id=draw.id, size=len(draw.assignments)).info("Draw saved")
    return draw


def run_draw(
    store: DrawStore,
    roster: Roster,
    required_count: int,
    node_budget: int = DEFAULT_NODE_BUDGET,
    seed: Optional[int] = None,
) -> Optional[DrawResult]:
    assignments = perform_draw(
        roster.participants,
        roster.restrictions,
        required_count=required_count,
        seed=seed,
        node_budget=node_budget,
    )
    if assignments is None:
        logger.bind(
            participants=len(roster.participants),
            restrictions=len(roster.restrictions),
        ).info("No valid assignment found for this shuffle")
        return None
    return save_draw_result(store, assignments, roster.list_name)


def get_active_draw(store: DrawStore) -> Optional[DrawResult]:
    active_id = store.get_active_id()
    if not active_id:
        return None
    for draw in store.list_draws():
        if draw.id == active_id:
            return draw
    return None


def consume_token(store: DrawStore, token: str) -> RevealResult:
    draw_id = store.get_active_id()
    if not draw_id:
        return RevealResult(TokenStatus.NOT_FOUND)

    assignment = store.find_assignment(draw_id, token)
    if assignment is None:
        return RevealResult(TokenStatus.NOT_FOUND)
    if assignment.accessed:
        return RevealResult(TokenStatus.ALREADY_CONSUMED)

    if not store.claim_token(draw_id, token):
        logger.bind(draw_id=draw_id).warning("Token claimed concurrently")
        return RevealResult(TokenStatus.ALREADY_CONSUMED)

    assignment.accessed = True
    logger.bind(draw_id=draw_id).info("Assignment revealed")
    return RevealResult(TokenStatus.CONSUMED, assignment)


def reveal_link(bot_username: str, token: str) -> str:
    return f"https://t.me/{bot_username}?start={token}"


def format_draw_label(draw: DrawResult) -> str:
    created = draw.created_at.strftime("%Y-%m-%d %H:%M UTC")
    title = html.escape(draw.name) if draw.name else "Unnamed draw"
    return f"{title} ({created})"


def format_links(draw: DrawResult, bot_username: str) -> List[str]:
    lines = []
    for assignment in draw.assignments:
        mark = " ✓ opened" if assignment.accessed else ""
        lines.append(
            f"{html.escape(assignment.giver)}{mark}\n{reveal_link(bot_username, assignment.token)}"
        )
    return lines
