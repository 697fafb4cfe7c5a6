# Fichier: tests/test_schedule_repository.py

import pandas as pd
import pytest
from datetime import date, datetime
from sqlalchemy import create_engine, insert
from sqlalchemy.pool import StaticPool
from unittest.mock import patch

from schedule_manager import ScheduleManager
from schedule_models import RoomSchedule, Schedule, Session
from schedule_repository import (
    SCHEDULE_TYPE_ROOM, ScheduleStorageError, SqlScheduleRepository, schedules_table,
)
from schedule_fakes import make_room_schedule


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    repo = SqlScheduleRepository(engine)
    repo.create_schema()
    return repo


class TestSaveAndFind:
    def test_room_schedule_round_trip(self, repository):
        original = make_room_schedule(teacher="Ms. Lee", class_id="C1")
        assert repository.save(original) is True

        stored = repository.find_by_id("A")
        assert isinstance(stored, RoomSchedule)
        assert stored == original

    def test_generic_schedule(self, repository):
        generic = Schedule(id="G", name="Réunion", description="Teacher: X",
                           start_datetime=datetime(2025, 5, 1, 14), end_datetime=datetime(2025, 5, 1, 15))
        repository.save(generic)
        stored = repository.find_by_id("G")
        assert type(stored) is Schedule
        assert stored.start_datetime == datetime(2025, 5, 1, 14)

    def test_missing_datetimes(self, repository):
        repository.save(make_room_schedule(start=None, end=None))
        stored = repository.find_by_id("A")
        assert stored.start_datetime is None
        assert stored.end_datetime is None

    def test_find_by_id_unknown_or_blank(self, repository):
        assert repository.find_by_id("Z") is None
        assert repository.find_by_id("") is None

    def test_duplicate_id_raises_storage_error(self, repository):
        repository.save(make_room_schedule())
        with pytest.raises(ScheduleStorageError):
            repository.save(make_room_schedule())

    def test_find_all_sorted_by_start(self, repository):
        repository.save(make_room_schedule(id="LATE", start=datetime(2025, 5, 1, 15), end=datetime(2025, 5, 1, 16)))
        repository.save(make_room_schedule(id="EARLY", start=datetime(2025, 5, 1, 8), end=datetime(2025, 5, 1, 9)))
        assert [s.id for s in repository.find_all()] == ["EARLY", "LATE"]

    def test_find_by_class_id(self, repository):
        repository.save(make_room_schedule(id="A", class_id="C1"))
        repository.save(make_room_schedule(id="B", class_id="C2"))
        assert [s.id for s in repository.find_by_class_id("C1")] == ["A"]
        assert repository.find_by_class_id("") == []

    def test_unknown_schedule_type_is_skipped(self, repository, engine):
        with engine.begin() as conn:
            conn.execute(insert(schedules_table).values(id="X", name="?", schedule_type="STUDENT"))
            conn.execute(insert(schedules_table).values(id="R", name="Math", schedule_type=SCHEDULE_TYPE_ROOM))
        assert [s.id for s in repository.find_all()] == ["R"]
        assert repository.find_by_id("R").capacity == 30


class TestFindByTimeRange:
    @pytest.fixture(autouse=True)
    def stored(self, repository):
        repository.save(make_room_schedule())

    def test_bounds_are_inclusive(self, repository):
        found = repository.find_by_time_range(datetime(2025, 5, 1, 10), datetime(2025, 5, 1, 11))
        assert [s.id for s in found] == ["A"]

    def test_outside_range(self, repository):
        assert repository.find_by_time_range(datetime(2025, 5, 1, 10, 1), datetime(2025, 5, 1, 11)) == []

    def test_invalid_range(self, repository):
        assert repository.find_by_time_range(datetime(2025, 5, 2), datetime(2025, 5, 1)) == []
        assert repository.find_by_time_range(None, datetime(2025, 5, 1)) == []


class TestUpdateAndDelete:
    def test_update_existing(self, repository):
        repository.save(make_room_schedule())
        changed = make_room_schedule(room_id="R202", teacher="Mr. Tran")
        assert repository.update(changed) is True
        stored = repository.find_by_id("A")
        assert stored.room_id == "R202"
        assert stored.teacher == "Mr. Tran"

    def test_update_unknown(self, repository):
        assert repository.update(make_room_schedule(id="Z")) is False

    def test_delete(self, repository):
        repository.save(make_room_schedule())
        assert repository.delete("A") is True
        assert repository.delete("A") is False
        assert repository.find_by_id("A") is None


class TestStorageErrors:
    @pytest.mark.parametrize("read", [
        lambda repo: repo.find_all(),
        lambda repo: repo.find_by_id("A"),
        lambda repo: repo.find_by_class_id("C1"),
        lambda repo: repo.find_by_time_range(datetime(2025, 5, 1), datetime(2025, 5, 2)),
    ])
    def test_missing_table_on_every_read(self, engine, read):
        repository = SqlScheduleRepository(engine)
        with pytest.raises(ScheduleStorageError):
            read(repository)

    def test_read_error_raised_by_pandas_is_wrapped(self, engine):
        repository = SqlScheduleRepository(engine)
        repository.create_schema()
        with patch("schedule_repository.pd.read_sql",
                   side_effect=pd.errors.DatabaseError("Execution failed on sql")):
            with pytest.raises(ScheduleStorageError):
                repository.find_all()

    def test_manager_converts_storage_errors(self, engine):
        manager = ScheduleManager(SqlScheduleRepository(engine))
        assert manager.get_teachers() == []
        assert manager.get_session_by_id("A") is None
        assert manager.add_session(Session(id="A", room="R101", date=date(2025, 5, 1),
                                           time_slot="09:00 - 10:00")) is False


class TestManagerOverSql:
    def test_end_to_end_scenario(self, repository):
        repository.save(make_room_schedule())
        manager = ScheduleManager(repository)

        assert manager.get_schedule(date(2025, 5, 1), date(2025, 5, 1)) == [Session(
            id="A", course_name="Math", teacher="Ms. Lee", room="R101",
            date=date(2025, 5, 1), time_slot="09:00 - 10:00"
        )]
        assert manager.has_schedule_conflict(
            Session(room="R101", date=date(2025, 5, 1), time_slot="09:30 - 10:30")) is True
        assert manager.has_schedule_conflict(
            Session(room="R101", date=date(2025, 5, 1), time_slot="10:00 - 11:00")) is False

    def test_add_update_delete(self, repository):
        manager = ScheduleManager(repository)
        session = Session(course_name="Chimie", teacher="Mme Dupont", room="L3",
                          date=date(2025, 5, 6), time_slot="08:00 - 10:00")
        assert manager.add_session(session)
        assert repository.find_by_id(session.id).description == "Teacher: Mme Dupont"

        session.time_slot = "10:00 - 12:00"
        assert manager.update_session(session)
        assert repository.find_by_id(session.id).end_datetime == datetime(2025, 5, 6, 12)

        assert manager.delete_session(session.id)
        assert manager.get_session_by_id(session.id) is None
