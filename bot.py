import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.bot import DefaultBotProperties

from config import load_config
from db import db, init_db
from handlers import routers as handler_routers


config = load_config()

# ───────────────────  Логирование  ────────────────────
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ───────────────────  Системные хуки  ──────────────────
async def on_startup() -> None:
    """Действия при запуске бота"""
    logger.info("Starting database initialization…")
    await init_db(config.db_path)
    logger.info("Database initialized")


async def on_shutdown(bot: Bot) -> None:
    """Действия при остановке бота"""
    logger.info("Shutting down…")
    await db.close()
    if bot.session:
        await bot.session.close()
        logger.info("Bot session closed")


# ───────────────────  Точка входа  ─────────────────────
async def main() -> None:
    if not config.bot_token:
        logger.error("API_TOKEN is not set, bot not started")
        return

    bot = Bot(
        token=config.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = Dispatcher()

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    for r in handler_routers:
        dp.include_router(r)

    try:
        await dp.start_polling(bot)
    except Exception as exc:
        logger.exception("Polling failed: %s", exc)
        raise


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    asyncio.run(main())
