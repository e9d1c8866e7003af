from aiogram import Router, types, F
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from datetime import date, datetime

from sheepfold.alerts import finance_summary
from sheepfold.controller import Screen
from sheepfold.models import Transaction, TransactionType, TRANSACTION_LABELS, parse_amount
from sheepfold.records import load_transactions, add_transaction
from sheepfold.utils import (
    get_controller, get_back_home_keyboard, get_main_menu_keyboard, get_skip_keyboard,
    format_currency, md_escape, open_store,
)

router = Router()

class TransactionStates(StatesGroup):
    tx_type = State()
    amount = State()
    tx_date = State()
    notes = State()

MAX_LISTED = 20


def render_finance(transactions: list[Transaction]):
    summary = finance_summary(transactions)
    sign = "+" if summary.balance > 0 else ""

    text = (
        "💵 **المالية**\n\n"
        f"📈 الدخل: {format_currency(summary.income)}\n"
        f"📉 المصروفات: {format_currency(summary.expense)}\n"
        f"💰 **الرصيد: {sign}{format_currency(summary.balance)}**\n"
        "————————————————\n"
    )
    if transactions:
        for t in transactions[:MAX_LISTED]:
            mark = "🟢 +" if t.is_income else "🔴 -"
            text += f"{mark}{format_currency(t.amount)} • {TRANSACTION_LABELS[t.type]} • {t.date.isoformat()}\n"
            if t.notes:
                text += f"    _{md_escape(t.notes)}_\n"
        if len(transactions) > MAX_LISTED:
            text += f"_... و {len(transactions) - MAX_LISTED} أخرى_\n"
    else:
        text += "_لا توجد معاملات_\n"

    keyboard = [
        [InlineKeyboardButton(text="➕ معاملة جديدة", callback_data="tx_add")],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data="main_menu")]
    ]
    return text, InlineKeyboardMarkup(inline_keyboard=keyboard)


@router.callback_query(F.data == "menu_finance")
async def start_finance(callback: types.CallbackQuery, state: FSMContext):
    get_controller(callback.message.chat.id).select(Screen.FINANCE)
    await state.set_state(None)

    with open_store() as store:
        transactions = load_transactions(store)

    text, markup = render_finance(transactions)
    await callback.message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    await callback.answer()


# Add transaction form
@router.callback_query(F.data == "tx_add")
async def add_transaction_start(callback: types.CallbackQuery, state: FSMContext):
    keyboard = [
        [InlineKeyboardButton(text=label, callback_data=f"txtype_{t.value}")]
        for t, label in TRANSACTION_LABELS.items()
    ]
    keyboard.append([InlineKeyboardButton(text="⬅️ رجوع", callback_data="menu_finance")])

    await callback.message.edit_text(
        text="🆕 **معاملة جديدة**\n\nنوع المعاملة:",
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await state.set_state(TransactionStates.tx_type)
    await callback.answer()

@router.callback_query(TransactionStates.tx_type, F.data.startswith("txtype_"))
async def receive_type(callback: types.CallbackQuery, state: FSMContext):
    await state.update_data(tx_type=callback.data.replace("txtype_", ""))
    await callback.message.edit_text(
        text="💰 **المبلغ**\n\nأدخل المبلغ:",
        parse_mode="Markdown",
        reply_markup=get_back_home_keyboard("menu_finance")
    )
    await state.set_state(TransactionStates.amount)
    await callback.answer()

@router.message(TransactionStates.amount)
async def receive_amount(message: types.Message, state: FSMContext):
    try:
        amount = parse_amount((message.text or "").strip().replace(",", ""))
        if amount <= 0: raise ValueError
    except ValueError:
        await message.answer("⚠️ الرجاء إدخال مبلغ موجب صحيح.")
        return

    await state.update_data(amount=str(amount))
    keyboard = [
        [InlineKeyboardButton(text=f"📅 اليوم ({date.today().isoformat()})", callback_data="txdate_today")],
        [InlineKeyboardButton(text="⬅️ رجوع", callback_data="menu_finance")]
    ]
    await message.answer(
        "📅 **التاريخ**\n\nاضغط اليوم أو أدخل التاريخ (YYYY-MM-DD):",
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=keyboard)
    )
    await state.set_state(TransactionStates.tx_date)

async def ask_notes(message: types.Message, state: FSMContext, tx_date: date, edit: bool):
    await state.update_data(tx_date=tx_date.isoformat())
    text = "📝 **ملاحظات** (اختياري)\n\nأرسل ملاحظة أو اضغط تخطي:"
    markup = get_skip_keyboard("tx_skip_notes", "menu_finance")
    if edit:
        await message.edit_text(text=text, parse_mode="Markdown", reply_markup=markup)
    else:
        await message.answer(text=text, parse_mode="Markdown", reply_markup=markup)
    await state.set_state(TransactionStates.notes)

@router.callback_query(TransactionStates.tx_date, F.data == "txdate_today")
async def receive_today(callback: types.CallbackQuery, state: FSMContext):
    await ask_notes(callback.message, state, date.today(), edit=True)
    await callback.answer()

@router.message(TransactionStates.tx_date)
async def receive_date(message: types.Message, state: FSMContext):
    try:
        d = datetime.strptime((message.text or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        await message.answer("⚠️ صيغة غير صحيحة. استخدم YYYY-MM-DD (مثال 2025-12-01).")
        return
    await ask_notes(message, state, d, edit=False)

@router.message(TransactionStates.notes)
async def receive_notes(message: types.Message, state: FSMContext):
    notes = (message.text or "").strip() or None
    await finalize_transaction(message, state, notes, edit=False)

@router.callback_query(TransactionStates.notes, F.data == "tx_skip_notes")
async def skip_notes(callback: types.CallbackQuery, state: FSMContext):
    await finalize_transaction(callback.message, state, None, edit=True)
    await callback.answer()

async def finalize_transaction(message: types.Message, state: FSMContext, notes: str | None, edit: bool):
    data = await state.get_data()
    transaction = Transaction(
        type=data["tx_type"],
        amount=data["amount"],
        date=data["tx_date"],
        notes=notes,
    )

    with open_store() as store:
        add_transaction(store, transaction)

    controller = get_controller(message.chat.id)
    controller.notify_data_changed()
    await state.clear()

    sign = "+" if transaction.type is TransactionType.SALE else "-"
    text = (
        f"✅ **تم تسجيل المعاملة!**\n\n"
        f"🧾 {TRANSACTION_LABELS[transaction.type]}: {sign}{format_currency(transaction.amount)}\n"
        f"📅 {transaction.date.isoformat()}"
    )
    if edit:
        await message.edit_text(text=text, parse_mode="Markdown", reply_markup=get_main_menu_keyboard(controller))
    else:
        await message.answer(text=text, parse_mode="Markdown", reply_markup=get_main_menu_keyboard(controller))
