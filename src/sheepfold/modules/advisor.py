"""Advisor screen: sends the farm figures to the text-generation service."""
import logging
from aiogram import Router, types, F
from aiogram.fsm.context import FSMContext
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from sheepfold.advisor import analyze
from sheepfold.controller import Screen
from sheepfold.records import load_sheep, load_transactions, load_events
from sheepfold.utils import get_controller, get_back_home_keyboard, open_store

router = Router()
logger = logging.getLogger(__name__)

# Chats with a request in flight; a second tap is refused, not queued
_pending: set[int] = set()

INTRO_TEXT = (
    "✨ **المستشار الذكي**\n\n"
    "يحلل المستشار بيانات القطيع والمالية والمهام القادمة ويقدم لك نصائح عملية."
)

def get_advisor_keyboard():
    keyboard = [
        [InlineKeyboardButton(text="✨ تحليل المزرعة", callback_data="advisor_run")],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data="main_menu")]
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)


@router.callback_query(F.data == "menu_advisor")
async def start_advisor(callback: types.CallbackQuery, state: FSMContext):
    get_controller(callback.message.chat.id).select(Screen.ADVISOR)
    await state.set_state(None)
    await callback.message.edit_text(
        text=INTRO_TEXT,
        parse_mode="Markdown",
        reply_markup=get_advisor_keyboard()
    )
    await callback.answer()

@router.callback_query(F.data == "advisor_run")
async def run_advisor(callback: types.CallbackQuery):
    chat_id = callback.message.chat.id
    if chat_id in _pending:
        await callback.answer("⏳ جاري التحليل بالفعل...", show_alert=True)
        return

    _pending.add(chat_id)
    try:
        # Drop the button while the request is in flight
        await callback.message.edit_text("⏳ جاري تحليل بيانات المزرعة...")
        await callback.answer()

        with open_store() as store:
            sheep = load_sheep(store)
            transactions = load_transactions(store)
            events = load_events(store)

        logger.info("Advisor requested for chat %s", chat_id)
        result = await analyze(sheep, transactions, events)
    finally:
        _pending.discard(chat_id)

    # Model output is free text, sent without Markdown parsing
    await callback.message.answer(
        text=f"✨ المستشار الذكي\n\n{result}",
        reply_markup=get_back_home_keyboard("menu_advisor")
    )
