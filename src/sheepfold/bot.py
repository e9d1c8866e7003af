import asyncio
import logging
from aiogram import Bot, Dispatcher, types, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.exceptions import TelegramNetworkError
from tenacity import retry, stop_never, wait_exponential, retry_if_exception_type, before_sleep_log

from sheepfold import VERSION
from sheepfold.config import cfg
from sheepfold.database import init_db

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MENU_TEXT = "🐑 **دفتر المزرعة**\nاختر من القائمة:"

@retry(
    stop=stop_never,
    wait=wait_exponential(multiplier=1, min=4, max=60),
    retry=retry_if_exception_type((TelegramNetworkError, ConnectionError, OSError)),
    before_sleep=before_sleep_log(logger, logging.WARNING)
)
async def resilient_polling(dp: Dispatcher, bot: Bot):
    """Start polling with automatic retry on network errors."""
    logger.info("Starting polling...")
    await dp.start_polling(bot)

def build_dispatcher() -> Dispatcher:
    from sheepfold.modules.herd import router as herd_router
    from sheepfold.modules.health import router as health_router
    from sheepfold.modules.finance import router as finance_router
    from sheepfold.modules.advisor import router as advisor_router
    from sheepfold.modules.alerts import router as alerts_router
    from sheepfold.utils import get_controller, get_main_menu_keyboard

    dp = Dispatcher()
    for r in [herd_router, health_router, finance_router, advisor_router, alerts_router]:
        dp.include_router(r)

    @dp.message(Command("start"))
    async def cmd_start(message: types.Message, state: FSMContext):
        await state.clear()
        controller = get_controller(message.chat.id)
        controller.notify_data_changed()
        await message.answer(
            MENU_TEXT,
            reply_markup=get_main_menu_keyboard(controller),
            parse_mode="Markdown"
        )

    @dp.callback_query(F.data == "main_menu")
    async def cb_main_menu(callback: types.CallbackQuery, state: FSMContext):
        await state.set_state(None)
        controller = get_controller(callback.message.chat.id)
        controller.notify_data_changed()
        await callback.message.edit_text(
            MENU_TEXT,
            reply_markup=get_main_menu_keyboard(controller),
            parse_mode="Markdown"
        )
        await callback.answer()

    return dp

async def main():
    bot = Bot(token=cfg.require_token())
    init_db()
    dp = build_dispatcher()

    logger.info("Sheepfold bot started (v%s)", VERSION)
    await resilient_polling(dp, bot)

def run():
    asyncio.run(main())

if __name__ == '__main__':
    run()
