import asyncio

import pytest

from app.viewmodels.delete_vm import DeleteState, DeleteVM, plan_delete
from app.viewmodels.main_vm import MainVM
from core.models import CacheRecord, Severity


def _messages(vm, severity=None):
    return [
        n.message for n in vm.notifications.items if severity is None or n.severity is severity
    ]


async def _loaded(source):
    vm = MainVM(source, notification_duration_ms=0)
    await vm.refresh()
    return vm


def test_start_delete_stages_snapshot_and_requests_confirmation(fake_source):
    prompts = []

    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm, confirm_handler=prompts.append)
        vm.toggle("a")
        vm.toggle("c")
        staged = deleter.start_delete()
        return vm, deleter, staged

    vm, deleter, staged = asyncio.run(scenario())
    assert deleter.state is DeleteState.CONFIRMING
    assert prompts == [staged]
    assert {r.id for r in staged.records} == {"a", "c"}
    assert staged.total_bytes == 250000
    assert fake_source.delete_started == []


def test_start_delete_without_selection_warns(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        return vm, deleter, deleter.start_delete()

    vm, deleter, staged = asyncio.run(scenario())
    assert staged is None
    assert deleter.state is DeleteState.IDLE
    assert _messages(vm, Severity.WARN) == ["No projects selected"]


def test_start_delete_twice_is_rejected(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.toggle("a")
        first = deleter.start_delete()
        second = deleter.start_delete()
        return vm, deleter, first, second

    vm, deleter, first, second = asyncio.run(scenario())
    assert second is None
    assert deleter.staged is first
    assert _messages(vm, Severity.WARN) == ["A deletion is already pending"]


def test_cancel_discards_staged_set_without_external_calls(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.set_all(True)
        deleter.start_delete()
        deleter.cancel()
        return deleter

    deleter = asyncio.run(scenario())
    assert deleter.state is DeleteState.IDLE
    assert deleter.staged is None
    assert fake_source.delete_started == []
    assert fake_source.list_calls == 1


def test_partial_failure_reports_each_error_and_refreshes_once(fake_source):
    fake_source.delete_errors["b"] = "Failed to delete directory b: locked"
    # Completion order differs from launch order
    fake_source.delete_delays.update({"a": 0.03, "b": 0.01, "c": 0.0})

    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.set_all(True)
        deleter.start_delete()
        result = await deleter.confirm()
        return vm, deleter, result

    vm, deleter, result = asyncio.run(scenario())
    assert sorted(result.success_ids) == ["a", "c"]
    assert result.failed == [("b", "Failed to delete directory b: locked")]
    assert _messages(vm, Severity.ERROR) == ["Failed to delete directory b: locked"]
    assert sorted(fake_source.delete_finished) == ["a", "b", "c"]
    assert fake_source.delete_finished != fake_source.delete_started
    # Initial load plus exactly one refresh after the commit
    assert fake_source.list_calls == 2
    assert [r.id for r in vm.records] == ["b"]
    assert not any(r.selected for r in vm.records)
    assert deleter.state is DeleteState.IDLE
    assert deleter.staged is None
    assert not vm.is_busy
    assert "Deletion complete: 2 deleted, 1 failed" in _messages(vm, Severity.INFO)


def test_all_requests_issued_before_any_completes(fake_source):
    fake_source.delete_delays.update({"a": 0.05, "b": 0.05, "c": 0.05})
    snapshots = []

    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.set_all(True)
        deleter.start_delete()
        task = asyncio.ensure_future(deleter.confirm())
        await asyncio.sleep(0.005)
        snapshots.append((list(fake_source.delete_started), list(fake_source.delete_finished)))
        await task

    asyncio.run(scenario())
    started, finished = snapshots[0]
    # Staged in view order (version ascending)
    assert started == ["a", "c", "b"]
    assert finished == []


def test_confirm_while_busy_keeps_prompt_pending(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.toggle("a")
        deleter.start_delete()

        fake_source.list_gate = asyncio.Event()
        refresh = asyncio.ensure_future(vm.refresh())
        await asyncio.sleep(0)
        rejected = await deleter.confirm()
        state_during = deleter.state
        fake_source.list_gate.set()
        await refresh
        return vm, deleter, rejected, state_during

    vm, deleter, rejected, state_during = asyncio.run(scenario())
    assert rejected is None
    assert state_during is DeleteState.CONFIRMING
    assert deleter.staged is not None
    assert fake_source.delete_started == []
    assert _messages(vm, Severity.WARN) == ["Please wait, an operation is in progress"]


def test_selection_changes_after_staging_do_not_affect_commit(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        deleter = DeleteVM(vm)
        vm.toggle("a")
        deleter.start_delete()
        vm.set_all(True)
        await deleter.confirm()

    asyncio.run(scenario())
    assert fake_source.delete_started == ["a"]


def test_confirm_without_pending_stage_is_noop(fake_source):
    async def scenario():
        vm = await _loaded(fake_source)
        return await DeleteVM(vm).confirm()

    assert asyncio.run(scenario()) is None
    assert fake_source.delete_started == []


def test_plan_delete_group_summaries():
    records = [
        CacheRecord(id="1", name="p1", group_key=2022, age_days=1, size_bytes=1),
        CacheRecord(id="2", name="p2", group_key=2022, age_days=1, size_bytes=1),
        CacheRecord(id="3", name="p3", group_key=2024, age_days=1, size_bytes=1),
    ]
    staged = plan_delete(records, [records[0], records[2]])

    by_group = {s.group_key: s for s in staged.group_summaries}
    assert by_group[2022].selected_count == 1
    assert by_group[2022].total_count == 2
    assert not by_group[2022].is_full_delete
    assert by_group[2024].is_full_delete


def test_start_delete_outside_loop_fails_cleanly_with_expiring_notifications(fake_source):
    vm = MainVM(fake_source)
    deleter = DeleteVM(vm)

    with pytest.raises(RuntimeError):
        deleter.start_delete()

    assert deleter.state is DeleteState.IDLE
    assert len(vm.notifications) == 0


def test_start_delete_with_bound_loop_works_from_sync_code(fake_source):
    loop = asyncio.new_event_loop()
    try:
        vm = MainVM(fake_source, loop=loop)
        deleter = DeleteVM(vm)
        assert deleter.start_delete() is None
        assert _messages(vm, Severity.WARN) == ["No projects selected"]
        loop.run_until_complete(asyncio.sleep(0))
    finally:
        vm.shutdown()
        loop.close()
