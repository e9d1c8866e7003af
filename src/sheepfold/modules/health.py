from aiogram import Router, types, F
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import StatesGroup, State
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from datetime import datetime

from sheepfold.controller import Screen
from sheepfold.models import CalendarEvent, EventType, FeedStockStatus, EVENT_LABELS, STOCK_LABELS
from sheepfold.records import load_events, load_feed_stock, save_feed_stock, add_event, toggle_event
from sheepfold.utils import (
    get_controller, get_back_home_keyboard, get_main_menu_keyboard, get_skip_keyboard, md_escape, open_store,
)

router = Router()

class EventStates(StatesGroup):
    event_type = State()
    title = State()
    event_date = State()
    details = State()

EVENT_ICONS = {
    EventType.VACCINE: "💉",
    EventType.FEED: "🌾",
}
STOCK_ICONS = {
    FeedStockStatus.GOOD: "🔋",
    FeedStockStatus.LOW: "🪫",
    FeedStockStatus.CRITICAL: "⚠️",
}

# Keeps the message under Telegram's length and button limits
MAX_LISTED = 20


def render_health(events: list[CalendarEvent], stock: FeedStockStatus):
    upcoming = [e for e in events if not e.is_completed]
    completed = [e for e in events if e.is_completed]

    text = (
        "💉 **الصحة والتغذية**\n\n"
        f"{STOCK_ICONS[stock]} مستوى مخزون العلف: **{STOCK_LABELS[stock]}**\n"
        "————————————————\n"
        "📅 **المهام القادمة**\n"
    )
    if upcoming:
        for e in upcoming[:MAX_LISTED]:
            text += f"{EVENT_ICONS[e.type]} {md_escape(e.title)} • {e.date.isoformat()}\n"
            if e.details:
                text += f"    _{md_escape(e.details)}_\n"
        if len(upcoming) > MAX_LISTED:
            text += f"_... و {len(upcoming) - MAX_LISTED} أخرى_\n"
    else:
        text += "_لا توجد مهام قادمة_\n"

    if completed:
        text += "\n✅ **المنجزة**\n"
        for e in completed[:MAX_LISTED]:
            text += f"{EVENT_ICONS[e.type]} {md_escape(e.title)} • {e.date.isoformat()}\n"
        if len(completed) > MAX_LISTED:
            text += f"_... و {len(completed) - MAX_LISTED} أخرى_\n"

    keyboard = [[
        InlineKeyboardButton(text=("✅ " if status is stock else "") + STOCK_LABELS[status], callback_data=f"stock_{status.value}")
        for status in FeedStockStatus
    ]]
    for e in upcoming[:MAX_LISTED]:
        keyboard.append([InlineKeyboardButton(text=f"⬜ {e.title} ({e.date.isoformat()})", callback_data=f"event_toggle_{e.id}")])
    for e in completed[:MAX_LISTED]:
        keyboard.append([InlineKeyboardButton(text=f"☑️ {e.title}", callback_data=f"event_toggle_{e.id}")])
    keyboard.append([InlineKeyboardButton(text="➕ مهمة جديدة", callback_data="event_add")])
    keyboard.append([InlineKeyboardButton(text="⬅️ رجوع", callback_data="main_menu")])
    return text, InlineKeyboardMarkup(inline_keyboard=keyboard)


async def show_health(message: types.Message, edit: bool = True):
    with open_store() as store:
        events = load_events(store)
        stock = load_feed_stock(store)

    text, markup = render_health(events, stock)
    if edit:
        await message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    else:
        await message.answer(text=text, parse_mode="Markdown", reply_markup=markup)


@router.callback_query(F.data == "menu_health")
async def start_health_menu(callback: types.CallbackQuery, state: FSMContext):
    get_controller(callback.message.chat.id).select(Screen.HEALTH)
    await state.set_state(None)
    await show_health(callback.message)
    await callback.answer()

@router.callback_query(F.data.startswith("stock_"))
async def change_stock(callback: types.CallbackQuery):
    status = FeedStockStatus(callback.data.replace("stock_", ""))

    with open_store() as store:
        changed = load_feed_stock(store) is not status
        if changed:
            save_feed_stock(store, status)
    if not changed:
        await callback.answer()
        return

    get_controller(callback.message.chat.id).notify_data_changed()
    await show_health(callback.message)
    await callback.answer(f"مخزون العلف: {STOCK_LABELS[status]}")

@router.callback_query(F.data.startswith("event_toggle_"))
async def toggle_complete(callback: types.CallbackQuery):
    event_id = callback.data.replace("event_toggle_", "")

    with open_store() as store:
        toggle_event(store, event_id)

    get_controller(callback.message.chat.id).notify_data_changed()
    await show_health(callback.message)
    await callback.answer()


# Add event form
@router.callback_query(F.data == "event_add")
async def add_event_start(callback: types.CallbackQuery, state: FSMContext):
    keyboard = [
        [InlineKeyboardButton(text=f"{EVENT_ICONS[t]} {label}", callback_data=f"etype_{t.value}")
         for t, label in EVENT_LABELS.items()],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data="menu_health")]
    ]
    await callback.message.edit_text(
        text="🆕 **مهمة جديدة**\n\nنوع المهمة:",
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await state.set_state(EventStates.event_type)
    await callback.answer()

@router.callback_query(EventStates.event_type, F.data.startswith("etype_"))
async def receive_event_type(callback: types.CallbackQuery, state: FSMContext):
    await state.update_data(event_type=callback.data.replace("etype_", ""))
    await callback.message.edit_text(
        text="📝 **العنوان**\n\nمثال: تطعيم جدري",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_health")
    )
    await state.set_state(EventStates.title)
    await callback.answer()

@router.message(EventStates.title)
async def receive_title(message: types.Message, state: FSMContext):
    title = (message.text or "").strip()
    if not title:
        await message.answer("⚠️ العنوان مطلوب.")
        return

    await state.update_data(title=title)
    await message.answer(
        "📅 **التاريخ**\n\nأدخل التاريخ (YYYY-MM-DD):",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_health")
    )
    await state.set_state(EventStates.event_date)

@router.message(EventStates.event_date)
async def receive_event_date(message: types.Message, state: FSMContext):
    try:
        d = datetime.strptime((message.text or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        await message.answer("⚠️ صيغة غير صحيحة. استخدم YYYY-MM-DD (مثال 2025-12-01).")
        return

    await state.update_data(event_date=d.isoformat())
    await message.answer(
        "ℹ️ **تفاصيل** (اختياري)\n\nأرسل التفاصيل أو اضغط تخطي:",
        parse_mode="Markdown",
        reply_markup=get_skip_keyboard("event_skip_details", "menu_health")
    )
    await state.set_state(EventStates.details)

@router.message(EventStates.details)
async def receive_details(message: types.Message, state: FSMContext):
    details = (message.text or "").strip() or None
    await save_new_event(message, state, details, edit=False)

@router.callback_query(EventStates.details, F.data == "event_skip_details")
async def skip_details(callback: types.CallbackQuery, state: FSMContext):
    await save_new_event(callback.message, state, None, edit=True)
    await callback.answer()

async def save_new_event(message: types.Message, state: FSMContext, details: str | None, edit: bool):
    data = await state.get_data()
    event = CalendarEvent(
        type=data["event_type"],
        title=data["title"],
        date=data["event_date"],
        details=details,
    )

    with open_store() as store:
        add_event(store, event)

    controller = get_controller(message.chat.id)
    controller.notify_data_changed()
    await state.clear()

    text = (
        f"✅ **تمت إضافة المهمة!**\n\n"
        f"{EVENT_ICONS[event.type]} {md_escape(event.title)} • {event.date.isoformat()}"
    )
    if edit:
        await message.edit_text(text=text, parse_mode="Markdown", reply_markup=get_main_menu_keyboard(controller))
    else:
        await message.answer(text=text, parse_mode="Markdown", reply_markup=get_main_menu_keyboard(controller))
