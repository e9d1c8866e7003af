"""Notification panel listing the current alerts."""
from aiogram import Router, types, F
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from sheepfold.alerts import Alert, Severity
from sheepfold.utils import get_controller, get_main_menu_keyboard, md_escape

router = Router()

SEVERITY_ICONS = {
    Severity.DANGER: "🔴",
    Severity.WARNING: "🟠",
    Severity.INFO: "🔵",
}

def render_alerts(alerts: list[Alert]) -> str:
    if not alerts:
        return "🔔 **التنبيهات (0)**\n\n_لا توجد تنبيهات جديدة_"

    text = f"🔔 **التنبيهات ({len(alerts)})**\n————————————————\n"
    for alert in alerts:
        text += f"{SEVERITY_ICONS[alert.severity]} {md_escape(alert.message)}\n\n"
    return text


@router.callback_query(F.data == "menu_alerts")
async def show_alerts(callback: types.CallbackQuery):
    controller = get_controller(callback.message.chat.id)
    alerts = controller.open_notifications()

    keyboard = [
        [InlineKeyboardButton(text="🔄 تحديث", callback_data='alerts_refresh')],
        [InlineKeyboardButton(text="✖️ إغلاق", callback_data='alerts_close')]
    ]
    await callback.message.edit_text(
        text=render_alerts(alerts),
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await callback.answer()

@router.callback_query(F.data == "alerts_refresh")
async def refresh_alerts(callback: types.CallbackQuery):
    controller = get_controller(callback.message.chat.id)
    before = list(controller.alerts)
    if controller.open_notifications() == before:
        await callback.answer("لا جديد")
        return
    await show_alerts(callback)

@router.callback_query(F.data == "alerts_close")
async def close_alerts(callback: types.CallbackQuery):
    controller = get_controller(callback.message.chat.id)
    controller.close_notifications()
    await callback.message.edit_text(
        "🐑 **دفتر المزرعة**\nاختر من القائمة:",
        parse_mode="Markdown",
        reply_markup=get_main_menu_keyboard(controller)
    )
    await callback.answer()
