from __future__ import annotations

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from tasktracker.domain.operations import OperationResult, TaskOperations
from tasktracker.domain.tasks.models import TASK_STATUSES
from tasktracker.domain.tasks.ports import Clock
from tasktracker.ui.telegram.keyboards.tasks import TASK_CB_PREFIX, tasks_list_kb
from tasktracker.ui.telegram.states.tasks import TasksFlow
from tasktracker.ui.telegram.texts import tasks as texts
from tasktracker.ui.telegram.utils.commands import (
    command_args,
    parse_add_args,
    parse_list_args,
    parse_status_args,
    parse_task_id,
)

router = Router()


def _error_text(result: OperationResult) -> str:
    return f"⚠️ {result.error or 'Error'} ({result.status_code})"


async def _send_list(message: Message, ops: TaskOperations, clock: Clock, status=None, search=None) -> None:
    result = await ops.list_tasks(status=status, search=search)
    if not result.ok:
        await message.answer(_error_text(result))
        return
    tasks = result.body
    if not tasks:
        await message.answer(texts.NO_TASKS)
        return
    await message.answer(texts.render_tasks_text(tasks, clock.now()), reply_markup=tasks_list_kb(tasks))


async def _create(message: Message, ops: TaskOperations, clock: Clock, name: str, description=None) -> None:
    result = await ops.create_task(name=name, description=description, user_id=message.from_user.id)
    if not result.ok:
        await message.answer(_error_text(result))
        return
    await message.answer("Created:\n" + texts.render_task(result.body, clock.now()))


@router.message(Command(commands=["tasks", "list"]))
async def tasks_cmd(message: Message, state: FSMContext, ops: TaskOperations, clock: Clock):
    await state.clear()
    status, search = parse_list_args(command_args(message.text))
    await _send_list(message, ops, clock, status=status, search=search)


@router.callback_query(F.data == "nav:tasks")
async def tasks_cb(cb: CallbackQuery, ops: TaskOperations, clock: Clock):
    await cb.answer()
    await _send_list(cb.message, ops, clock)


@router.message(Command("add"))
async def add_cmd(message: Message, state: FSMContext, ops: TaskOperations, clock: Clock):
    await state.clear()
    args = command_args(message.text)
    if not args:
        await state.set_state(TasksFlow.add_name)
        await message.answer(texts.ASK_NAME)
        return
    name, description = parse_add_args(args)
    if not name:
        await message.answer(texts.USAGE_ADD)
        return
    await _create(message, ops, clock, name, description)


@router.callback_query(F.data == "nav:add")
async def add_cb(cb: CallbackQuery, state: FSMContext):
    await cb.answer()
    await state.set_state(TasksFlow.add_name)
    await cb.message.answer(texts.ASK_NAME)


@router.message(TasksFlow.add_name)
async def add_name_entered(message: Message, state: FSMContext, ops: TaskOperations, clock: Clock):
    txt = (message.text or "").strip()
    if txt.lower() in ("/cancel", "cancel"):
        await state.clear()
        await message.answer(texts.CANCELLED)
        return

    name, description = parse_add_args(txt)
    result = await ops.create_task(name=name, description=description, user_id=message.from_user.id)
    if result.status_code == 400:
        # stay in the flow so the user can retry
        await message.answer(_error_text(result) + "\n" + texts.ASK_NAME)
        return

    await state.clear()
    if not result.ok:
        await message.answer(_error_text(result))
        return
    await message.answer("Created:\n" + texts.render_task(result.body, clock.now()))


@router.message(Command("status"))
async def status_cmd(message: Message, ops: TaskOperations, clock: Clock):
    task_id, status = parse_status_args(command_args(message.text))
    if task_id is None:
        await message.answer(texts.USAGE_STATUS)
        return
    result = await ops.update_status(task_id, status)
    if not result.ok:
        await message.answer(_error_text(result))
        return
    await message.answer(texts.render_task(result.body, clock.now()))


@router.message(Command(commands=["timer_start", "timer_stop"]))
async def timer_cmd(message: Message, ops: TaskOperations, clock: Clock):
    command = (message.text or "").split(maxsplit=1)[0].lstrip("/").split("@")[0]
    task_id = parse_task_id(command_args(message.text))
    if task_id is None:
        await message.answer(texts.USAGE_TIMER)
        return

    if command == "timer_start":
        result = await ops.start_timer(task_id)
    else:
        result = await ops.stop_timer(task_id)

    if not result.ok:
        await message.answer(_error_text(result))
        return
    await message.answer(texts.render_task(result.body, clock.now()))


@router.callback_query(F.data.startswith(f"{TASK_CB_PREFIX}:"))
async def task_action_cb(cb: CallbackQuery, ops: TaskOperations, clock: Clock):
    # tk:<action>:<id>
    parts = (cb.data or "").split(":")
    task_id = parse_task_id(parts[-1]) if len(parts) == 3 else None
    if task_id is None:
        await cb.answer("Invalid action.")
        return

    action = parts[1]
    if action == "start":
        result = await ops.start_timer(task_id)
    elif action == "stop":
        result = await ops.stop_timer(task_id)
    elif action in TASK_STATUSES:
        result = await ops.update_status(task_id, action)
    else:
        await cb.answer("Invalid action.")
        return

    if not result.ok:
        await cb.answer(result.error or "Error", show_alert=True)
        return

    await cb.answer()
    listed = await ops.list_tasks()
    if not listed.ok or not listed.body:
        return
    try:
        await cb.message.edit_text(
            texts.render_tasks_text(listed.body, clock.now()),
            reply_markup=tasks_list_kb(listed.body),
        )
    except TelegramBadRequest:
        # old message or identical content: send a fresh list instead
        await cb.message.answer(
            texts.render_tasks_text(listed.body, clock.now()),
            reply_markup=tasks_list_kb(listed.body),
        )
