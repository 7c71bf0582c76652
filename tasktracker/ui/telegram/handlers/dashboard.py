from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from tasktracker.domain.operations import TaskOperations
from tasktracker.ui.telegram.texts.tasks import render_summary

router = Router()


async def _summary_text(ops: TaskOperations, user_id: int) -> str:
    result = await ops.dashboard_summary(user_id=user_id)
    if not result.ok:
        return result.error or "Error"
    return render_summary(result.body)


@router.message(Command("dashboard"))
async def dashboard_cmd(message: Message, ops: TaskOperations):
    await message.answer(await _summary_text(ops, message.from_user.id))


@router.callback_query(F.data == "nav:dashboard")
async def dashboard_cb(cb: CallbackQuery, ops: TaskOperations):
    await cb.answer()
    await cb.message.answer(await _summary_text(ops, cb.from_user.id))
