from contextlib import contextmanager
from decimal import Decimal
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from sheepfold.controller import ViewController
from sheepfold.database import get_db
from sheepfold.records import FarmSnapshot, load_snapshot
from sheepfold.store import KeyValueStore

# One controller per chat; the farm itself is single-user
_controllers: dict[int, ViewController] = {}

@contextmanager
def open_store():
    """Key-value store on a fresh session, closed on exit."""
    db = next(get_db())
    try:
        yield KeyValueStore(db)
    finally:
        db.close()

def load_farm_snapshot() -> FarmSnapshot:
    with open_store() as store:
        return load_snapshot(store)

def get_controller(chat_id: int) -> ViewController:
    controller = _controllers.get(chat_id)
    if controller is None:
        controller = ViewController(load_farm_snapshot)
        _controllers[chat_id] = controller
    return controller

def get_main_menu_keyboard(controller: ViewController | None = None):
    """Main navigation with the alert indicator on the notifications button."""
    alerts_label = "🔔 التنبيهات"
    if controller and controller.has_alerts:
        alerts_label = f"🔔 التنبيهات 🔴 ({len(controller.alerts)})"

    keyboard = [
        [InlineKeyboardButton(text="🐑 القطيع", callback_data='menu_herd'),
         InlineKeyboardButton(text="💉 الصحة", callback_data='menu_health')],
        [InlineKeyboardButton(text="💵 المالية", callback_data='menu_finance'),
         InlineKeyboardButton(text="✨ المستشار", callback_data='menu_advisor')],
        [InlineKeyboardButton(text=alerts_label, callback_data='menu_alerts')],
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def get_back_home_keyboard(back_callback: str = 'main_menu'):
    keyboard = [
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data=back_callback),
         InlineKeyboardButton(text="🏠 الرئيسية", callback_data='main_menu')]
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def get_skip_keyboard(skip_callback: str, back_callback: str = 'main_menu'):
    keyboard = [
        [InlineKeyboardButton(text="⏭️ تخطي", callback_data=skip_callback)],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data=back_callback)]
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def format_currency(amount: Decimal) -> str:
    return f"{amount:,.2f} ريال"

def md_escape(text: str) -> str:
    """Escape user text for Telegram's legacy Markdown."""
    for ch in ("_", "*", "`", "["):
        text = text.replace(ch, "\\" + ch)
    return text
