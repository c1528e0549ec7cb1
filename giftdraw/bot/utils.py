from __future__ import annotations

from aiogram import types
from aiogram.fsm.context import FSMContext
from loguru import logger

from giftdraw.core.config import get_settings
from giftdraw.services.rate_limit import rate_limiter
from giftdraw.services.roster import Roster

SLOW_DOWN = "You're doing that too often. Please slow down."
GENERIC_ERROR = "Something went wrong. Please try again later."


def check_rate_limit(user_id: int, action: str) -> bool:
    result = rate_limiter.allow(user_id, action)
    if not result.allowed:
        logger.bind(user_id=user_id, action=action).debug(
            "Rate limited for {seconds:.1f}s", seconds=result.retry_after
        )
    return result.allowed


async def ensure_organizer(message: types.Message, action: str) -> bool:
    """Shared guard for organizer commands; answers the user when it refuses."""
    if not check_rate_limit(message.from_user.id, action):
        await message.answer(SLOW_DOWN)
        return False
    if message.chat.type != "private":
        await message.answer("Organizer commands only work in a private chat with me.")
        return False
    if not get_settings().is_organizer(message.from_user.id):
        await message.answer("Only the organizer can manage the draw.")
        return False
    return True


async def load_roster(state: FSMContext) -> Roster:
    data = await state.get_data()
    return Roster.from_dict(data.get("roster"), capacity=get_settings().participant_count)


async def save_roster(state: FSMContext, roster: Roster) -> None:
    await state.update_data(roster=roster.to_dict())


def parse_positions(text: str) -> list[int]:
    """``"/restrict 1 2,3"`` -> ``[1, 2, 3]``; raises ValueError on junk."""
    parts = text.replace(",", " ").split()[1:]
    return [int(part) for part in parts]


def log_handler_exception(action: str, user_id: int | None, chat_id: int | None, error: Exception) -> None:
    logger.bind(action=action, user_id=user_id, chat_id=chat_id).exception(
        "Handler error: {error}", error=str(error)
    )
