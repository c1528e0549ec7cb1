from aiogram import Router

from giftdraw.bot.handlers import draws, roster, start

router = Router()
router.include_router(start.router)
router.include_router(roster.router)
router.include_router(draws.router)
