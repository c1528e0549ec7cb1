import html

from aiogram import Router, types
from aiogram.filters import CommandObject, CommandStart

from giftdraw.bot.utils import GENERIC_ERROR, SLOW_DOWN, check_rate_limit, log_handler_exception
from giftdraw.db import get_session
from giftdraw.services import draw_flow
from giftdraw.services.draw_flow import TokenStatus
from giftdraw.services.draw_store import SqlDrawStore

router = Router()

HELP_TEXT = (
    "Hello! I run the gift exchange draw.\n\n"
    "If the organizer sent you a link, open it to see who you are giving a gift to. "
    "Each link works only once, so keep the name somewhere safe.\n\n"
    "Organizers: /new starts a list, /add adds people, /restrict sets who cannot "
    "give to whom, /draw runs the draw and /links shows the links to share."
)


@router.message(CommandStart())
async def command_start_handler(message: types.Message, command: CommandObject) -> None:
    token = (command.args or "").strip()
    if not token:
        if not check_rate_limit(message.from_user.id, "start"):
            await message.answer(SLOW_DOWN)
            return
        await message.answer(HELP_TEXT)
        return

    if not check_rate_limit(message.from_user.id, "reveal"):
        await message.answer(SLOW_DOWN)
        return

    try:
        with get_session() as session:
            result = draw_flow.consume_token(SqlDrawStore(session), token)

        if result.status == TokenStatus.ALREADY_CONSUMED:
            await message.answer(
                "This link was already opened. If you need help, contact the organizer."
            )
            return
        if result.status == TokenStatus.NOT_FOUND:
            await message.answer("No information was found for this link.")
            return

        assignment = result.assignment
        await message.answer(
            f"Hello, {html.escape(assignment.giver)}!\n\n"
            f"You are giving a gift to: <b>{html.escape(assignment.receiver)}</b>\n\n"
            "Remember to keep it secret and prepare something special 🎁"
        )
    except Exception as exc:
        log_handler_exception("reveal", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)
