from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove

from tasktracker.ui.telegram.keyboards.mainmenu import main_menu_kb
from tasktracker.ui.telegram.texts.tasks import CANCELLED

router = Router()

HELP_TEXT = (
    "Task tracker.\n"
    "/tasks [todo|in_progress|done] [search] - list tasks\n"
    "/add name | description - create a task\n"
    "/status id status - change status\n"
    "/timer_start id, /timer_stop id - timer\n"
    "/dashboard - summary"
)


@router.message(CommandStart())
async def start_cmd(message: Message, state: FSMContext):
    await state.clear()
    await message.answer(HELP_TEXT, reply_markup=main_menu_kb())


@router.message(Command("menu"))
async def menu_cmd(message: Message, state: FSMContext):
    await state.clear()
    await message.answer("Menu", reply_markup=main_menu_kb())


@router.message(Command("cancel"))
async def cancel_cmd(message: Message, state: FSMContext):
    await state.clear()
    await message.answer(CANCELLED, reply_markup=ReplyKeyboardRemove())


@router.callback_query(F.data == "cancel")
async def cancel_cb(cb: CallbackQuery, state: FSMContext):
    await cb.answer()
    await state.clear()
    await cb.message.answer(CANCELLED, reply_markup=ReplyKeyboardRemove())
