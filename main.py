from __future__ import annotations

import asyncio

import uvloop
from aiogram.types import BotCommand, BotCommandScopeDefault
from loguru import logger

from giftdraw.bot import bot, dp
from giftdraw.core.config import get_settings
from giftdraw.core.logging import setup_logging
from giftdraw.db import init_engine


USERS_COMMANDS: dict[str, str] = {
    "start": "help, or open your result link",
    "new": "start a new participant list",
    "add": "add a participant",
    "remove": "remove a participant",
    "participants": "show participants and restrictions",
    "restrict": "set who a participant cannot give to",
    "unrestrict": "drop a participant's restriction",
    "draw": "run the draw",
    "links": "show the links of the active draw",
    "draws": "list saved draws",
    "use": "switch the active draw",
    "cleardraws": "delete every saved draw",
}


async def set_default_commands() -> None:
    await bot.set_my_commands(
        [
            BotCommand(command=command, description=description)
            for command, description in USERS_COMMANDS.items()
        ],
        scope=BotCommandScopeDefault(),
    )


async def on_startup() -> None:
    logger.info("bot starting...")

    await set_default_commands()

    bot_info = await bot.get_me()
    settings = get_settings()

    logger.info("Name     - {name}", name=bot_info.full_name)
    logger.info("Username - @{username}", username=bot_info.username)
    logger.info("ID       - {id}", id=bot_info.id)
    logger.info("Draw size    - {count}", count=settings.participant_count)
    logger.info(
        "Organizers   - {organizers}",
        organizers=", ".join(map(str, sorted(settings.organizer_ids))) or "anyone",
    )

    logger.info("bot started")


async def on_shutdown() -> None:
    logger.info("bot stopping...")

    await dp.storage.close()

    await bot.session.close()

    logger.info("bot stopped")


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_path)
    init_engine(settings.database_url)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())


if __name__ == "__main__":
    if not getattr(asyncio, "debug", False):
        uvloop.install()

    asyncio.run(main())
