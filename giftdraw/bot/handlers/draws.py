from __future__ import annotations

import html

from aiogram import Router, types
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import LinkPreviewOptions
from loguru import logger

from giftdraw.bot.keyboards import CANCEL_CLEAR, CONFIRM_CLEAR, confirm_clear_keyboard
from giftdraw.bot.utils import (
    GENERIC_ERROR,
    SLOW_DOWN,
    check_rate_limit,
    ensure_organizer,
    load_roster,
    log_handler_exception,
)
from giftdraw.core.config import get_settings
from giftdraw.db import get_session
from giftdraw.services import draw_flow
from giftdraw.services.draw_engine import DrawConfigError
from giftdraw.services.draw_store import DrawResult, SqlDrawStore

router = Router()

LINKS_PER_MESSAGE = 10


async def send_links(message: types.Message, draw: DrawResult) -> None:
    me = await message.bot.me()
    lines = draw_flow.format_links(draw, me.username)
    await message.answer(
        f"Links for {draw_flow.format_draw_label(draw)}.\n"
        "Send each person their own link. A link shows the result only once."
    )
    for start in range(0, len(lines), LINKS_PER_MESSAGE):
        await message.answer(
            "\n\n".join(lines[start:start + LINKS_PER_MESSAGE]),
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )


@router.message(Command("draw"))
async def draw_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "draw"):
        return

    settings = get_settings()
    try:
        roster = await load_roster(state)
        with get_session() as session:
            draw = draw_flow.run_draw(
                SqlDrawStore(session),
                roster,
                required_count=settings.participant_count,
                node_budget=settings.search_node_budget,
            )

        if draw is None:
            await message.answer(
                "The draw could not be completed with the current restrictions. "
                "Try again, or relax some restrictions."
            )
            return

        await message.answer("The draw was completed successfully!")
        await send_links(message, draw)
    except DrawConfigError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("draw", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("links"))
async def links_handler(message: types.Message) -> None:
    if not await ensure_organizer(message, "links"):
        return

    try:
        with get_session() as session:
            draw = draw_flow.get_active_draw(SqlDrawStore(session))
        if draw is None:
            await message.answer("There is no active draw yet. Run /draw first.")
            return
        await send_links(message, draw)
    except Exception as exc:
        log_handler_exception("links", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("draws"))
async def draws_handler(message: types.Message) -> None:
    if not await ensure_organizer(message, "draws"):
        return

    try:
        with get_session() as session:
            store = SqlDrawStore(session)
            draws = store.list_draws()
            active_id = store.get_active_id()

        if not draws:
            await message.answer("No draws saved yet.")
            return

        lines = ["Saved draws:"]
        for draw in draws:
            opened = sum(1 for a in draw.assignments if a.accessed)
            marker = " (active)" if draw.id == active_id else ""
            lines.append(
                f"{draw_flow.format_draw_label(draw)}{marker}\n"
                f"<code>{html.escape(draw.id)}</code>, opened {opened}/{len(draw.assignments)}"
            )
        lines.append("")
        lines.append("Use /use <draw id> to switch the active draw, /cleardraws to delete all.")
        await message.answer("\n".join(lines))
    except Exception as exc:
        log_handler_exception("draws", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("use"))
async def use_draw_handler(message: types.Message) -> None:
    if not await ensure_organizer(message, "use"):
        return

    parts = message.text.split(maxsplit=1)
    if len(parts) < 2:
        await message.answer("Usage: /use <draw id>, as shown by /draws")
        return

    draw_id = parts[1].strip()
    try:
        with get_session() as session:
            SqlDrawStore(session).set_active(draw_id)
        logger.bind(draw_id=draw_id, user_id=message.from_user.id).info("Active draw changed")
        await message.answer("Active draw updated. Its links are now the ones that work.")
    except KeyError:
        await message.answer("No draw with that id. Check /draws.")
    except Exception as exc:
        log_handler_exception("use", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("cleardraws"))
async def clear_draws_handler(message: types.Message) -> None:
    if not await ensure_organizer(message, "cleardraws"):
        return

    await message.answer(
        "Delete every saved draw? Links that were already shared will stop working.",
        reply_markup=confirm_clear_keyboard(),
    )


@router.callback_query(lambda c: c.data in {CONFIRM_CLEAR, CANCEL_CLEAR})
async def confirm_clear_callback_handler(query: types.CallbackQuery) -> None:
    if not check_rate_limit(query.from_user.id, "confirm_clear"):
        await query.answer(SLOW_DOWN, show_alert=True)
        return

    if not get_settings().is_organizer(query.from_user.id):
        await query.answer("Only the organizer can manage the draw.", show_alert=True)
        return

    if query.data == CANCEL_CLEAR:
        await query.answer("Nothing was deleted.")
        await query.message.edit_reply_markup(reply_markup=None)
        return

    try:
        with get_session() as session:
            SqlDrawStore(session).clear()
        logger.bind(user_id=query.from_user.id).info("All draws cleared")
        await query.answer("All draws deleted.", show_alert=True)
        await query.message.edit_text("All draws were deleted.")
    except Exception as exc:
        log_handler_exception("confirm_clear", query.from_user.id, query.message.chat.id, exc)
        await query.answer(GENERIC_ERROR, show_alert=True)
