import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.default import DefaultBotProperties

from couponbot.core.config import BOT_TOKEN, LOG_LEVEL
from couponbot.core.database import Base, engine
from couponbot.models.coupon import Coupon  # noqa: F401 (registers the table)
from couponbot.bot import admin, callbacks, handlers
from couponbot.bot.live_feed import live_dashboard
from couponbot.bot.middleware import AdminMiddleware
from couponbot.core.auth import auth_service

# Logging setup
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_dispatcher() -> Dispatcher:
    dp = Dispatcher()

    # Admin routers first, the user router catches every plain text
    admin.router.message.middleware(AdminMiddleware())
    callbacks.router.callback_query.middleware(AdminMiddleware())
    dp.include_router(admin.login_router)
    dp.include_router(admin.router)
    dp.include_router(callbacks.router)
    dp.include_router(handlers.router)
    return dp


async def on_startup():
    # Create tables if they do not exist
    Base.metadata.create_all(bind=engine)
    logger.info("🤖 Coupon bot gestartet!")


async def on_shutdown():
    logger.info("🛑 Stopping... signing out admins.")
    auth_service.sign_out_all()
    live_dashboard.close_all()


async def main():
    bot = Bot(token=BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = build_dispatcher()
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)
    await dp.start_polling(bot)


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Bot gestoppt.")
