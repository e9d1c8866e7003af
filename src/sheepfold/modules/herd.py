from aiogram import Router, types, F
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import StatesGroup, State
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from sheepfold.alerts import herd_summary
from sheepfold.controller import Screen
from sheepfold.models import Sheep, HealthStatus, Gender, STATUS_LABELS, GENDER_LABELS
from sheepfold.records import load_sheep, add_sheep, set_sheep_status, filter_sheep
from sheepfold.utils import get_controller, get_back_home_keyboard, get_main_menu_keyboard, md_escape, open_store

router = Router()

class SheepStates(StatesGroup):
    search = State()
    tag_id = State()
    age = State()
    gender = State()
    status = State()

STATUS_ICONS = {
    HealthStatus.HEALTHY: "🟢",
    HealthStatus.SICK: "🔴",
    HealthStatus.TREATMENT: "🟠",
}

MAX_LISTED = 30 # Telegram message / keyboard size


def parse_age(text: str) -> int:
    """Whole months, 0 or more. Raises ValueError otherwise."""
    age = int(text.strip())
    if age < 0:
        raise ValueError(f"Age cannot be negative: {age}")
    return age


def render_herd(sheep: list[Sheep], status_filter: str = "all", search: str = ""):
    summary = herd_summary(sheep)
    status = None if status_filter == "all" else HealthStatus(status_filter)
    shown = filter_sheep(sheep, status, search)

    text = (
        f"🐑 **القطيع** ({summary.total})\n"
        f"🟢 سليم: {summary.healthy} | 🔴 مريض: {summary.sick} | 🟠 علاج: {summary.treatment}\n"
        f"♂️ ذكور: {summary.male} | ♀️ إناث: {summary.female}\n"
    )
    if search:
        text += f"🔍 بحث: {md_escape(search)}\n"
    text += "————————————————\n"

    if shown:
        for s in shown[:MAX_LISTED]:
            text += f"{STATUS_ICONS[s.status]} {md_escape(s.tag_id)} • {GENDER_LABELS[s.gender]} • {s.age} شهر\n"
        if len(shown) > MAX_LISTED:
            text += f"_... و {len(shown) - MAX_LISTED} أخرى_\n"
    else:
        text += "_لا توجد أغنام مطابقة_\n"

    keyboard = []
    filters = [("all", "الكل")] + [(st.value, label) for st, label in STATUS_LABELS.items()]
    keyboard.append([
        InlineKeyboardButton(text=("✅ " if value == status_filter else "") + label, callback_data=f"herd_filter_{value}")
        for value, label in filters
    ])

    row = []
    for s in shown[:MAX_LISTED]:
        row.append(InlineKeyboardButton(text=f"{STATUS_ICONS[s.status]} {s.tag_id}", callback_data=f"sheep_{s.id}"))
        if len(row) == 3:
            keyboard.append(row)
            row = []
    if row:
        keyboard.append(row)

    keyboard.append([
        InlineKeyboardButton(text="🔍 بحث", callback_data="herd_search"),
        InlineKeyboardButton(text="➕ إضافة", callback_data="herd_add"),
    ])
    keyboard.append([InlineKeyboardButton(text="⬅️ رجوع", callback_data="main_menu")])
    return text, InlineKeyboardMarkup(inline_keyboard=keyboard)


async def show_herd(message: types.Message, state: FSMContext, edit: bool = True):
    data = await state.get_data()
    with open_store() as store:
        sheep = load_sheep(store)

    text, markup = render_herd(sheep, data.get("herd_filter", "all"), data.get("herd_search", ""))
    if edit:
        await message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    else:
        await message.answer(text=text, parse_mode="Markdown", reply_markup=markup)


@router.callback_query(F.data == "menu_herd")
async def start_herd_menu(callback: types.CallbackQuery, state: FSMContext):
    get_controller(callback.message.chat.id).select(Screen.HERD)
    await state.set_state(None)
    await show_herd(callback.message, state)
    await callback.answer()

@router.callback_query(F.data.startswith("herd_filter_"))
async def herd_filter(callback: types.CallbackQuery, state: FSMContext):
    value = callback.data.replace("herd_filter_", "")
    data = await state.get_data()
    if data.get("herd_filter", "all") == value:
        await callback.answer()
        return
    await state.update_data(herd_filter=value)
    await show_herd(callback.message, state)
    await callback.answer()

@router.callback_query(F.data == "herd_search")
async def herd_search_start(callback: types.CallbackQuery, state: FSMContext):
    await callback.message.edit_text(
        text="🔍 **بحث**\n\nأدخل رقم القرط أو جزءاً منه (أرسل `-` لإلغاء البحث):",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_herd")
    )
    await state.set_state(SheepStates.search)
    await callback.answer()

@router.message(SheepStates.search)
async def receive_search(message: types.Message, state: FSMContext):
    term = (message.text or "").strip()
    if term == "-":
        term = ""
    await state.update_data(herd_search=term)
    await state.set_state(None)
    await show_herd(message, state, edit=False)


# Single sheep & status transitions
def render_sheep(sheep: Sheep):
    text = (
        f"🐑 **رقم القرط:** {md_escape(sheep.tag_id)}\n"
        f"{STATUS_ICONS[sheep.status]} الحالة: {STATUS_LABELS[sheep.status]}\n"
        f"⚧ الجنس: {GENDER_LABELS[sheep.gender]}\n"
        f"📅 العمر: {sheep.age} شهر"
    )
    if sheep.notes:
        text += f"\n📝 {md_escape(sheep.notes)}"

    keyboard = [
        [InlineKeyboardButton(text="✅ سليم", callback_data=f"sstatus_{sheep.id}_{HealthStatus.HEALTHY.value}"),
         InlineKeyboardButton(text="🩺 علاج", callback_data=f"sstatus_{sheep.id}_{HealthStatus.TREATMENT.value}"),
         InlineKeyboardButton(text="⚠️ مريض", callback_data=f"sstatus_{sheep.id}_{HealthStatus.SICK.value}")],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data="menu_herd")]
    ]
    return text, InlineKeyboardMarkup(inline_keyboard=keyboard)

@router.callback_query(F.data.startswith("sheep_"))
async def show_sheep(callback: types.CallbackQuery):
    sheep_id = callback.data.replace("sheep_", "")
    with open_store() as store:
        sheep = next((s for s in load_sheep(store) if s.id == sheep_id), None)

    if not sheep:
        await callback.answer("لم يتم العثور على هذا الرأس.", show_alert=True)
        return

    text, markup = render_sheep(sheep)
    await callback.message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    await callback.answer()

@router.callback_query(F.data.startswith("sstatus_"))
async def change_status(callback: types.CallbackQuery):
    _, sheep_id, status = callback.data.split("_")
    status = HealthStatus(status)

    with open_store() as store:
        current = next((s for s in load_sheep(store) if s.id == sheep_id), None)
        if current and current.status is not status:
            updated = set_sheep_status(store, sheep_id, status)

    if not current:
        await callback.answer("لم يتم العثور على هذا الرأس.", show_alert=True)
        return
    if current.status is status:
        await callback.answer()
        return

    get_controller(callback.message.chat.id).notify_data_changed()

    sheep = next(s for s in updated if s.id == sheep_id)
    text, markup = render_sheep(sheep)
    await callback.message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    await callback.answer(f"الحالة: {STATUS_LABELS[status]}")


# Add sheep form
@router.callback_query(F.data == "herd_add")
async def add_sheep_start(callback: types.CallbackQuery, state: FSMContext):
    await callback.message.edit_text(
        text="🆕 **إضافة رأس جديد**\n\nأدخل رقم القرط:",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_herd")
    )
    await state.set_state(SheepStates.tag_id)
    await callback.answer()

@router.message(SheepStates.tag_id)
async def receive_tag(message: types.Message, state: FSMContext):
    tag = (message.text or "").strip()
    if not tag:
        await message.answer("⚠️ رقم القرط مطلوب.")
        return

    await state.update_data(new_tag_id=tag)
    await message.answer(
        "📅 **العمر**\n\nكم عمره بالأشهر؟",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_herd")
    )
    await state.set_state(SheepStates.age)

@router.message(SheepStates.age)
async def receive_age(message: types.Message, state: FSMContext):
    try:
        age = parse_age(message.text or "")
    except ValueError:
        await message.answer("⚠️ أدخل عدد الأشهر كرقم صحيح (0 أو أكثر).")
        return

    await state.update_data(new_age=age)
    keyboard = [
        [InlineKeyboardButton(text="أنثى (نعجة)", callback_data=f"sgender_{Gender.FEMALE.value}")],
        [InlineKeyboardButton(text="ذكر (فحل/طلي)", callback_data=f"sgender_{Gender.MALE.value}")],
    ]
    await message.answer(
        "⚧ **الجنس**",
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await state.set_state(SheepStates.gender)

@router.callback_query(SheepStates.gender, F.data.startswith("sgender_"))
async def receive_gender(callback: types.CallbackQuery, state: FSMContext):
    await state.update_data(new_gender=callback.data.replace("sgender_", ""))

    keyboard = [
        [InlineKeyboardButton(text=label, callback_data=f"snew_{status.value}")]
        for status, label in STATUS_LABELS.items()
    ]
    await callback.message.edit_text(
        text="🩺 **الحالة الصحية**",
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await state.set_state(SheepStates.status)
    await callback.answer()

@router.callback_query(SheepStates.status, F.data.startswith("snew_"))
async def receive_new_status(callback: types.CallbackQuery, state: FSMContext):
    data = await state.get_data()
    sheep = Sheep(
        tag_id=data["new_tag_id"],
        age=data["new_age"],
        gender=data["new_gender"],
        status=callback.data.replace("snew_", ""),
    )

    with open_store() as store:
        add_sheep(store, sheep)

    controller = get_controller(callback.message.chat.id)
    controller.notify_data_changed()

    # Keep the list filter, drop the form
    await state.set_state(None)
    await state.update_data(new_tag_id=None, new_age=None, new_gender=None)

    await callback.message.edit_text(
        text=f"✅ **تمت الإضافة!**\n\n🐑 {md_escape(sheep.tag_id)} • {GENDER_LABELS[sheep.gender]} • {sheep.age} شهر • {STATUS_LABELS[sheep.status]}",
        parse_mode="Markdown",
        reply_markup=get_main_menu_keyboard(controller)
    )
    await callback.answer()
