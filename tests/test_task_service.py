"""
Unit tests for TaskService: validation, status changes and the timer state machine.

Uses the in-memory repo and a manual clock, no SQLite.
Run with: python -m pytest tests/test_task_service.py -v
"""
from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from tasktracker.domain.common.errors import (
    NotFoundError,
    TimerAlreadyRunningError,
    TimerNotRunningError,
    ValidationError,
)
from tasktracker.domain.tasks.models import CreateTaskRequest, TaskFilters
from tasktracker.domain.tasks.service import TaskService

from .fakes import FakeClock, InMemoryTaskRepo, make_task


def _service():
    repo = InMemoryTaskRepo()
    clock = FakeClock()
    return TaskService(repo=repo, clock=clock), repo, clock


async def _create(svc: TaskService, name: str = "Write report", **kwargs):
    return await svc.create(CreateTaskRequest(user_id=1, name=name, **kwargs))


# ----- create -----


def test_create_applies_defaults():
    async def run():
        svc, repo, clock = _service()
        task = await svc.create(CreateTaskRequest(user_id=7, name="  Write report  "))
        assert task.id == 1
        assert task.user_id == 7
        assert task.name == "Write report"
        assert task.description == ""
        assert task.status == "todo"
        assert task.timer_running is False
        assert task.timer_started_at is None
        assert task.elapsed_seconds == 0
        assert task.created_at == clock.now()
        assert task.updated_at == clock.now()
        assert repo.tasks[1] == task

    asyncio.run(run())


def test_create_keeps_given_status_and_description():
    async def run():
        svc, _, _ = _service()
        task = await _create(svc, description="quarterly", status="in_progress")
        assert task.status == "in_progress"
        assert task.description == "quarterly"

    asyncio.run(run())


@pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
def test_create_rejects_empty_name(name):
    async def run():
        svc, repo, _ = _service()
        with pytest.raises(ValidationError):
            await _create(svc, name=name)
        assert repo.tasks == {}

    asyncio.run(run())


def test_create_name_length_boundary():
    async def run():
        svc, repo, _ = _service()
        task = await _create(svc, name="a" * 200)
        assert len(task.name) == 200

        with pytest.raises(ValidationError):
            await _create(svc, name="a" * 201)
        assert len(repo.tasks) == 1

    asyncio.run(run())


def test_create_name_limit_applies_after_trim():
    async def run():
        svc, _, _ = _service()
        task = await _create(svc, name="  " + "b" * 200 + "  ")
        assert task.name == "b" * 200

    asyncio.run(run())


def test_create_rejects_unknown_status():
    async def run():
        svc, repo, _ = _service()
        with pytest.raises(ValidationError):
            await _create(svc, status="blocked")
        assert repo.tasks == {}

    asyncio.run(run())


def test_create_assigns_unique_ids():
    async def run():
        svc, _, _ = _service()
        ids = {(await _create(svc, name=f"t{i}")).id for i in range(5)}
        assert len(ids) == 5

    asyncio.run(run())


# ----- list -----


def test_list_filters_and_orders_by_id():
    async def run():
        svc, _, _ = _service()
        a = await _create(svc, name="Write report")
        b = await _create(svc, name="Read REPORT draft", status="done")
        c = await _create(svc, name="Groceries")

        all_tasks = await svc.list()
        assert [t.id for t in all_tasks] == [a.id, b.id, c.id]

        done = await svc.list(TaskFilters(status="done"))
        assert [t.id for t in done] == [b.id]

        found = await svc.list(TaskFilters(search="report"))
        assert [t.id for t in found] == [a.id, b.id]

        assert list(await svc.list(TaskFilters(search="zzz"))) == []

    asyncio.run(run())


def test_list_rejects_unknown_status_filter():
    async def run():
        svc, _, _ = _service()
        with pytest.raises(ValidationError):
            await svc.list(TaskFilters(status="archived"))

    asyncio.run(run())


# ----- update_status -----


def test_update_status_sets_status_and_bumps_updated_at():
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)
        clock.advance(30)
        updated = await svc.update_status(task.id, "in_progress")
        assert updated.status == "in_progress"
        assert updated.updated_at == task.updated_at + timedelta(seconds=30)
        assert updated.created_at == task.created_at

    asyncio.run(run())


def test_update_status_same_value_is_safe():
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)
        for _ in range(3):
            clock.advance(1)
            again = await svc.update_status(task.id, "todo")
            assert again.status == "todo"
            assert again.name == task.name
            assert again.elapsed_seconds == task.elapsed_seconds
            assert again.timer_running == task.timer_running
        assert again.updated_at > task.updated_at

    asyncio.run(run())


@pytest.mark.parametrize("status", [None, "", "finished"])
def test_update_status_validates_before_lookup(status):
    async def run():
        svc, _, _ = _service()
        # task 99 does not exist, validation still wins
        with pytest.raises(ValidationError):
            await svc.update_status(99, status)

    asyncio.run(run())


def test_update_status_unknown_task():
    async def run():
        svc, _, _ = _service()
        with pytest.raises(NotFoundError):
            await svc.update_status(99, "done")

    asyncio.run(run())


def test_done_does_not_stop_running_timer():
    async def run():
        svc, _, _ = _service()
        task = await _create(svc)
        await svc.start_timer(task.id)
        updated = await svc.update_status(task.id, "done")
        assert updated.status == "done"
        assert updated.timer_running is True
        assert updated.timer_started_at is not None

    asyncio.run(run())


# ----- timer -----


def test_start_then_stop_accumulates_elapsed():
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)

        started = await svc.start_timer(task.id)
        assert started.timer_running is True
        assert started.timer_started_at == clock.now()

        clock.advance(120)
        stopped = await svc.stop_timer(task.id)
        assert stopped.timer_running is False
        assert stopped.timer_started_at is None
        assert stopped.elapsed_seconds == 120
        assert stopped.updated_at == clock.now()

        await svc.start_timer(task.id)
        clock.advance(45)
        again = await svc.stop_timer(task.id)
        assert again.elapsed_seconds == 165

    asyncio.run(run())


@pytest.mark.parametrize("delta", [0, 1, 59, 3600, 86400 + 7])
def test_elapsed_increases_by_exact_delta(delta):
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)
        await svc.start_timer(task.id)
        clock.advance(delta)
        stopped = await svc.stop_timer(task.id)
        assert stopped.elapsed_seconds == delta

    asyncio.run(run())


def test_stop_floors_fractional_seconds():
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)
        await svc.start_timer(task.id)
        clock.advance(10.9)
        stopped = await svc.stop_timer(task.id)
        assert stopped.elapsed_seconds == 10

    asyncio.run(run())


def test_stop_with_clock_moved_backwards_adds_nothing():
    async def run():
        svc, _, clock = _service()
        task = await _create(svc)
        await svc.start_timer(task.id)
        clock.advance(100)
        await svc.stop_timer(task.id)

        await svc.start_timer(task.id)
        clock.advance(-300)
        stopped = await svc.stop_timer(task.id)
        assert stopped.elapsed_seconds == 100
        assert stopped.timer_running is False

    asyncio.run(run())


def test_start_twice_fails_and_leaves_state():
    async def run():
        svc, repo, clock = _service()
        task = await _create(svc)
        started = await svc.start_timer(task.id)
        updates_before = repo.update_calls

        clock.advance(5)
        with pytest.raises(TimerAlreadyRunningError):
            await svc.start_timer(task.id)

        assert repo.tasks[task.id] == started
        assert repo.update_calls == updates_before

    asyncio.run(run())


def test_stop_without_start_fails_and_leaves_state():
    async def run():
        svc, repo, _ = _service()
        task = await _create(svc)
        with pytest.raises(TimerNotRunningError):
            await svc.stop_timer(task.id)
        assert repo.tasks[task.id] == task
        assert repo.update_calls == 0

    asyncio.run(run())


def test_timer_on_unknown_task():
    async def run():
        svc, _, _ = _service()
        with pytest.raises(NotFoundError):
            await svc.start_timer(42)
        with pytest.raises(NotFoundError):
            await svc.stop_timer(42)

    asyncio.run(run())


def test_concurrent_start_exactly_one_wins():
    async def run():
        svc, repo, _ = _service()
        task = await _create(svc)

        results = await asyncio.gather(
            svc.start_timer(task.id),
            svc.start_timer(task.id),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, Exception)]
        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], TimerAlreadyRunningError)
        assert repo.tasks[task.id].timer_running is True

    asyncio.run(run())


def test_concurrent_stop_counts_interval_once():
    async def run():
        svc, repo, clock = _service()
        task = await _create(svc)
        await svc.start_timer(task.id)
        clock.advance(60)

        results = await asyncio.gather(
            svc.stop_timer(task.id),
            svc.stop_timer(task.id),
            return_exceptions=True,
        )
        assert sum(1 for r in results if isinstance(r, TimerNotRunningError)) == 1
        assert repo.tasks[task.id].elapsed_seconds == 60

    asyncio.run(run())


def test_different_tasks_do_not_block_each_other():
    async def run():
        svc, repo, clock = _service()
        a = await _create(svc, name="a")
        b = await _create(svc, name="b")
        await asyncio.gather(svc.start_timer(a.id), svc.start_timer(b.id))
        clock.advance(10)
        await asyncio.gather(svc.stop_timer(a.id), svc.stop_timer(b.id))
        assert repo.tasks[a.id].elapsed_seconds == 10
        assert repo.tasks[b.id].elapsed_seconds == 10
        # locks are released and dropped
        assert len(svc._locks) == 0

    asyncio.run(run())


# ----- summary / snapshots -----


def test_summary_counts():
    async def run():
        svc, _, clock = _service()
        a = await _create(svc, name="a")
        await _create(svc, name="b", status="done")
        await svc.start_timer(a.id)
        clock.advance(90)
        await svc.stop_timer(a.id)
        await svc.start_timer(a.id)

        summary = await svc.summary()
        assert summary.total == 2
        assert summary.by_status == {"todo": 1, "in_progress": 0, "done": 1}
        assert summary.running_timers == 1
        assert summary.elapsed_seconds == 90

    asyncio.run(run())


def test_elapsed_at_includes_open_interval():
    task = make_task(elapsed_seconds=30)
    assert task.elapsed_at(task.created_at + timedelta(hours=1)) == 30

    running = make_task(
        elapsed_seconds=30,
        timer_running=True,
        timer_started_at=task.created_at,
    )
    assert running.elapsed_at(task.created_at + timedelta(seconds=15)) == 45
