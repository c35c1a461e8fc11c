"""
Tests del ciclo de vida de tareas contra SQLite en memoria
"""
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from conftest import NOW, ctx_for
from database.repositories import TaskRepository, TicketRepository
from models.housekeeping import HousekeepingTask, TaskStatus
from services.errors import Conflict, Forbidden, InvalidArgument, NotFound, StoreUnavailable
from services.housekeeping_service import HousekeepingService
from services.maintenance_service import MaintenanceService

TODAY = NOW.date()
LATER = NOW + timedelta(minutes=20)


def _assign(db, staff, rooms=("101",), owner="hk", day=None):
    return HousekeepingService.assign_rooms(db, ctx_for(staff["manager"]), staff[owner].id, list(rooms), day)


def _advance_to_ready(db, staff, task):
    ctx = ctx_for(staff["hk"])
    HousekeepingService.update_own_status(db, ctx, task.id, "cleaning")
    return HousekeepingService.update_own_status(db, ctx, task.id, "ready_for_inspection")


class TestAssignRooms:

    def test_creates_dirty_tasks_for_today(self, db, staff):
        tasks = _assign(db, staff, rooms=["101", "102"])
        assert [t.room_number for t in tasks] == ["101", "102"]
        for task in tasks:
            assert task.status == TaskStatus.DIRTY
            assert task.is_rush is False
            assert task.started_at is None and task.finished_at is None
            assert task.checkout_time is None
            assert task.date == TODAY
            assert task.housekeeper_id == staff["hk"].id

    def test_explicit_date(self, db, staff):
        tomorrow = TODAY + timedelta(days=1)
        (task,) = _assign(db, staff, day=tomorrow)
        assert task.date == tomorrow

    def test_same_room_on_different_days(self, db, staff):
        _assign(db, staff, rooms=["305"])
        _assign(db, staff, rooms=["305"], day=TODAY + timedelta(days=1))
        assert len(TaskRepository(db).list_where(HousekeepingTask.room_number == "305")) == 2

    def test_head_housekeeper_can_assign_and_own(self, db, staff):
        tasks = HousekeepingService.assign_rooms(db, ctx_for(staff["head"]), staff["head"].id, ["7"])
        assert tasks[0].housekeeper_id == staff["head"].id

    @pytest.mark.parametrize("role", ["hk", "maint"])
    def test_forbidden_roles(self, db, staff, role):
        with pytest.raises(Forbidden):
            HousekeepingService.assign_rooms(db, ctx_for(staff[role]), staff["hk"].id, ["101"])

    @pytest.mark.parametrize("rooms", [[], ["101", "  "]])
    def test_invalid_room_lists(self, db, staff, rooms):
        with pytest.raises(InvalidArgument):
            _assign(db, staff, rooms=rooms)
        assert TaskRepository(db).list_where() == []

    def test_owner_must_be_housekeeping_staff(self, db, staff):
        with pytest.raises(InvalidArgument):
            _assign(db, staff, owner="maint")

    def test_unknown_owner(self, db, staff):
        with pytest.raises(NotFound):
            HousekeepingService.assign_rooms(db, ctx_for(staff["manager"]), 9999, ["101"])

    def test_partial_failure_keeps_created_rows(self, db, staff, monkeypatch):
        original_insert = TaskRepository.insert
        calls = {"n": 0}

        def flaky_insert(self, **fields):
            calls["n"] += 1
            if calls["n"] == 2:
                raise StoreUnavailable("Error de base de datos")
            return original_insert(self, **fields)

        monkeypatch.setattr(TaskRepository, "insert", flaky_insert)
        with pytest.raises(StoreUnavailable):
            _assign(db, staff, rooms=["101", "102", "103"])

        monkeypatch.undo()
        assert [t.room_number for t in TaskRepository(db).list_where()] == ["101"]


class TestStatusTransitions:

    def test_cleaning_sets_started_at_once(self, db, staff):
        (task,) = _assign(db, staff)
        ctx = ctx_for(staff["hk"])
        task = HousekeepingService.update_own_status(db, ctx, task.id, "cleaning")
        assert task.status == TaskStatus.CLEANING
        assert task.started_at == NOW

        HousekeepingService.update_own_status(db, ctx_for(staff["hk"], LATER), task.id, "dirty")
        task = HousekeepingService.update_own_status(db, ctx_for(staff["hk"], LATER), task.id, "cleaning")
        assert task.started_at == NOW

    def test_ready_refreshes_finished_at(self, db, staff):
        (task,) = _assign(db, staff)
        task = _advance_to_ready(db, staff, task)
        assert task.finished_at == NOW

        HousekeepingService.update_own_status(db, ctx_for(staff["hk"], LATER), task.id, "cleaning")
        task = HousekeepingService.update_own_status(db, ctx_for(staff["hk"], LATER), task.id, "ready_for_inspection")
        assert task.finished_at == LATER
        assert task.started_at == NOW

    def test_reverting_keeps_timestamps(self, db, staff):
        (task,) = _assign(db, staff)
        task = _advance_to_ready(db, staff, task)
        task = HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), task.id, "dirty")
        assert task.status == TaskStatus.DIRTY
        assert task.started_at == NOW and task.finished_at == NOW

    @pytest.mark.parametrize("status", ["dirty", "cleaning", "ready_for_inspection"])
    def test_own_status_on_foreign_task_is_forbidden(self, db, staff, status):
        (task,) = _assign(db, staff, owner="hk2")
        with pytest.raises(Forbidden):
            HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), task.id, status)

    def test_invalid_status_checked_before_existence(self, db, staff):
        with pytest.raises(InvalidArgument):
            HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), 9999, "stayover")
        with pytest.raises(NotFound):
            HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), 9999, "cleaning")

    def test_update_any_status_by_head(self, db, staff):
        (task,) = _assign(db, staff, owner="hk2")
        task = HousekeepingService.update_any_status(db, ctx_for(staff["head"]), task.id, "cleaning")
        assert task.status == TaskStatus.CLEANING
        assert task.started_at == NOW

    @pytest.mark.parametrize("role", ["manager", "hk", "maint"])
    def test_update_any_status_only_head(self, db, staff, role):
        (task,) = _assign(db, staff)
        with pytest.raises(Forbidden):
            HousekeepingService.update_any_status(db, ctx_for(staff[role]), task.id, "cleaning")

    def test_maintenance_cannot_update_own_status(self, db, staff):
        (task,) = _assign(db, staff)
        with pytest.raises(Forbidden):
            HousekeepingService.update_own_status(db, ctx_for(staff["maint"]), task.id, "cleaning")


class TestStayover:

    @pytest.mark.parametrize("status", ["dirty", "cleaning", "ready_for_inspection"])
    def test_manager_sets_stayover_from_any_open_status(self, db, staff, status):
        (task,) = _assign(db, staff)
        HousekeepingService.update_any_status(db, ctx_for(staff["head"]), task.id, status)
        task = HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id)
        assert task.status == TaskStatus.STAYOVER

    @pytest.mark.parametrize("role", ["head", "hk", "maint"])
    def test_only_manager(self, db, staff, role):
        (task,) = _assign(db, staff)
        with pytest.raises(Forbidden):
            HousekeepingService.set_stayover(db, ctx_for(staff[role]), task.id)

    def test_inspected_task_cannot_become_stayover(self, db, staff):
        (task,) = _assign(db, staff)
        _advance_to_ready(db, staff, task)
        HousekeepingService.mark_inspected(db, ctx_for(staff["head"]), task.id)
        with pytest.raises(Conflict):
            HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id)

    def test_no_way_out_of_stayover(self, db, staff):
        (task,) = _assign(db, staff)
        HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id)
        with pytest.raises(Conflict):
            HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), task.id, "cleaning")
        with pytest.raises(Conflict):
            HousekeepingService.update_any_status(db, ctx_for(staff["head"]), task.id, "dirty")
        with pytest.raises(Conflict):
            HousekeepingService.mark_inspected(db, ctx_for(staff["manager"]), task.id)

    def test_foreign_stayover_task_is_forbidden_not_conflict(self, db, staff):
        (task,) = _assign(db, staff, owner="hk2")
        HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id)
        with pytest.raises(Forbidden):
            HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), task.id, "cleaning")

    def test_missing_task(self, db, staff):
        with pytest.raises(NotFound):
            HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), 9999)


class TestInspection:

    @pytest.mark.parametrize("role", ["head", "manager"])
    def test_inspect_ready_task(self, db, staff, role):
        (task,) = _assign(db, staff)
        _advance_to_ready(db, staff, task)
        task = HousekeepingService.mark_inspected(db, ctx_for(staff[role], LATER), task.id)
        assert task.status == TaskStatus.INSPECTED
        assert task.finished_at == NOW

    def test_cannot_inspect_dirty_task(self, db, staff):
        (task,) = _assign(db, staff)
        with pytest.raises(Conflict):
            HousekeepingService.mark_inspected(db, ctx_for(staff["head"]), task.id)

    @pytest.mark.parametrize("role", ["hk", "maint"])
    def test_forbidden_roles(self, db, staff, role):
        (task,) = _assign(db, staff)
        _advance_to_ready(db, staff, task)
        with pytest.raises(Forbidden):
            HousekeepingService.mark_inspected(db, ctx_for(staff[role]), task.id)

    def test_inspected_is_terminal_for_every_command(self, db, staff):
        (task,) = _assign(db, staff)
        _advance_to_ready(db, staff, task)
        HousekeepingService.mark_inspected(db, ctx_for(staff["head"]), task.id)

        attempts = [
            lambda: HousekeepingService.update_own_status(db, ctx_for(staff["hk"]), task.id, "dirty"),
            lambda: HousekeepingService.update_own_status(db, ctx_for(staff["head"]), task.id, "cleaning"),
            lambda: HousekeepingService.update_any_status(db, ctx_for(staff["head"]), task.id, "ready_for_inspection"),
            lambda: HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id),
            lambda: HousekeepingService.mark_inspected(db, ctx_for(staff["manager"]), task.id),
            lambda: HousekeepingService.toggle_rush(db, ctx_for(staff["manager"]), task.id, True),
            lambda: HousekeepingService.set_checkout_time(db, ctx_for(staff["maint"]), task.id, "10:00"),
        ]
        for attempt in attempts:
            with pytest.raises(Conflict):
                attempt()

        db.expire_all()
        stored = TaskRepository(db).get_by_id(task.id)
        assert stored.status == TaskStatus.INSPECTED
        assert stored.is_rush is False
        assert stored.checkout_time is None


class TestRushAndCheckout:

    @pytest.mark.parametrize("role", ["manager", "head"])
    def test_toggle_rush(self, db, staff, role):
        (task,) = _assign(db, staff)
        task = HousekeepingService.toggle_rush(db, ctx_for(staff[role]), task.id, True)
        assert task.is_rush is True
        task = HousekeepingService.toggle_rush(db, ctx_for(staff[role]), task.id, False)
        assert task.is_rush is False
        assert task.status == TaskStatus.DIRTY

    def test_toggle_rush_forbidden_for_housekeeper(self, db, staff):
        (task,) = _assign(db, staff)
        with pytest.raises(Forbidden):
            HousekeepingService.toggle_rush(db, ctx_for(staff["hk"]), task.id, True)

    def test_rush_allowed_on_stayover(self, db, staff):
        (task,) = _assign(db, staff)
        HousekeepingService.set_stayover(db, ctx_for(staff["manager"]), task.id)
        task = HousekeepingService.toggle_rush(db, ctx_for(staff["head"]), task.id, True)
        assert task.is_rush is True and task.status == TaskStatus.STAYOVER

    @pytest.mark.parametrize("role", ["manager", "head", "hk", "hk2", "maint"])
    def test_checkout_time_any_role(self, db, staff, role):
        (task,) = _assign(db, staff)
        task = HousekeepingService.set_checkout_time(db, ctx_for(staff[role]), task.id, " 11:45 ")
        assert task.checkout_time == "11:45"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_checkout_time_clears(self, db, staff, value):
        (task,) = _assign(db, staff)
        HousekeepingService.set_checkout_time(db, ctx_for(staff["hk"]), task.id, "12:00")
        task = HousekeepingService.set_checkout_time(db, ctx_for(staff["hk"]), task.id, value)
        assert task.checkout_time is None

    def test_checkout_time_missing_task(self, db, staff):
        with pytest.raises(NotFound):
            HousekeepingService.set_checkout_time(db, ctx_for(staff["hk"]), 9999, "12:00")


class TestNotes:

    def test_add_note(self, db, staff):
        (task,) = _assign(db, staff)
        note = HousekeepingService.add_note(db, ctx_for(staff["hk"]), task.id, "  Falta una toalla ")
        assert note.text == "Falta una toalla"
        assert note.author_id == staff["hk"].id
        assert note.created_at == NOW
        assert note.has_photo is False

    def test_note_allowed_on_inspected_task(self, db, staff):
        (task,) = _assign(db, staff)
        _advance_to_ready(db, staff, task)
        HousekeepingService.mark_inspected(db, ctx_for(staff["head"]), task.id)
        note = HousekeepingService.add_note(db, ctx_for(staff["head"]), task.id, "ok")
        assert note.task_id == task.id

    @pytest.mark.parametrize("role", ["manager", "maint"])
    def test_forbidden_roles(self, db, staff, role):
        (task,) = _assign(db, staff)
        with pytest.raises(Forbidden):
            HousekeepingService.add_note(db, ctx_for(staff[role]), task.id, "hola")

    def test_blank_text(self, db, staff):
        (task,) = _assign(db, staff)
        with pytest.raises(InvalidArgument):
            HousekeepingService.add_note(db, ctx_for(staff["hk"]), task.id, "   ")

    def test_missing_task(self, db, staff):
        with pytest.raises(NotFound):
            HousekeepingService.add_note(db, ctx_for(staff["hk"]), 9999, "hola")


class TestDeletion:

    def test_reset_today_only_deletes_today(self, db, staff):
        _assign(db, staff, rooms=["101", "102"])
        _assign(db, staff, rooms=["103"], owner="hk2")
        yesterday = TODAY - timedelta(days=1)
        _assign(db, staff, rooms=["201"], day=yesterday)
        _assign(db, staff, rooms=["301"], day=TODAY + timedelta(days=1))

        deleted = HousekeepingService.reset_today(db, ctx_for(staff["head"]))
        assert deleted == 3
        remaining = sorted(t.room_number for t in TaskRepository(db).list_where())
        assert remaining == ["201", "301"]

    def test_reset_today_with_nothing_to_delete(self, db, staff):
        assert HousekeepingService.reset_today(db, ctx_for(staff["manager"])) == 0

    @pytest.mark.parametrize("role", ["hk", "maint"])
    def test_reset_today_forbidden(self, db, staff, role):
        with pytest.raises(Forbidden):
            HousekeepingService.reset_today(db, ctx_for(staff[role]))

    def test_reset_today_partial_failure_keeps_deleted_rows(self, db, staff, monkeypatch):
        _assign(db, staff, rooms=["101", "102", "103"])
        original_delete = TaskRepository.delete_by_id
        calls = {"n": 0}

        def flaky_delete(self, obj_id):
            calls["n"] += 1
            if calls["n"] == 2:
                raise StoreUnavailable("Error de base de datos")
            return original_delete(self, obj_id)

        monkeypatch.setattr(TaskRepository, "delete_by_id", flaky_delete)
        with pytest.raises(StoreUnavailable):
            HousekeepingService.reset_today(db, ctx_for(staff["head"]))

        monkeypatch.undo()
        remaining = TaskRepository(db).list_where(HousekeepingTask.date == TODAY)
        assert len(remaining) == 2

    def test_delete_task(self, db, staff):
        (task,) = _assign(db, staff)
        task_id = task.id
        HousekeepingService.add_note(db, ctx_for(staff["hk"]), task.id, "nota")
        HousekeepingService.delete_task(db, ctx_for(staff["manager"]), task_id)
        assert TaskRepository(db).get_by_id(task_id) is None

    def test_delete_missing_task(self, db, staff):
        with pytest.raises(NotFound):
            HousekeepingService.delete_task(db, ctx_for(staff["manager"]), 9999)

    def test_delete_task_referenced_by_ticket(self, db, staff):
        (task,) = _assign(db, staff)
        ticket = MaintenanceService.create_ticket_from_task(db, ctx_for(staff["head"]), task.id, "Canilla pierde")
        task_id, ticket_id = task.id, ticket.id

        HousekeepingService.delete_task(db, ctx_for(staff["head"]), task_id)

        db.expire_all()
        stored = TicketRepository(db).get_by_id(ticket_id)
        assert stored.housekeeping_task_id == task_id
        assert TaskRepository(db).get_by_id(task_id) is None


class TestStoreFailures:

    def test_commit_failure_is_store_unavailable(self, db, staff, monkeypatch):
        (task,) = _assign(db, staff)

        def broken_commit():
            raise OperationalError("UPDATE housekeeping_tasks", {}, Exception("database is down"))

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(StoreUnavailable):
            HousekeepingService.toggle_rush(db, ctx_for(staff["manager"]), task.id, True)
