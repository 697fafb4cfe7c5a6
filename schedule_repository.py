"""
Stockage SQL des plannings (implémentation de IScheduleRepository).

Une seule table 'schedules' porte les plannings génériques et les plannings
de salle, distingués par la colonne schedule_type.
Chaque méthode ouvre et referme sa propre connexion.
"""
from datetime import datetime
from typing import Any, Dict, Final, List, Optional

import pandas as pd
from sqlalchemy import (
    Column, DateTime, Integer, MetaData, String, Table, Text,
    delete, insert, select, update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from db_utils import get_engine
from logger_config import get_logger
from schedule_models import DEFAULT_CAPACITY, DEFAULT_ROOM_TYPE, RoomSchedule, Schedule

logger = get_logger(__name__)

SCHEDULE_TYPE_ROOM: Final[str] = "ROOM"
SCHEDULE_TYPE_GENERIC: Final[str] = "GENERIC"

metadata = MetaData()

schedules_table = Table(
    "schedules", metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False, default=""),
    Column("description", Text),
    Column("teacher", String(255)),
    Column("class_id", String(64), index=True),
    Column("start_time", DateTime, index=True),
    Column("end_time", DateTime),
    Column("schedule_type", String(16), nullable=False, default=SCHEDULE_TYPE_GENERIC),
    Column("room_id", String(64)),
    Column("capacity", Integer),
    Column("room_type", String(32)),
)


class ScheduleStorageError(Exception):
    """Erreur d'accès au stockage des plannings (connexion, requête, contrainte)."""


def _clean(value: Any) -> Any:
    """Convertit les valeurs manquantes pandas (NaN, NaT, None) en None."""
    if value is None or pd.isna(value):
        return None
    return value


def _to_datetime(value: Any) -> Optional[datetime]:
    value = _clean(value)
    if value is None:
        return None
    return pd.Timestamp(value).to_pydatetime()


class SqlScheduleRepository:
    """Accès aux plannings via SQLAlchemy ; lectures avec pandas.read_sql."""

    def __init__(self, engine: Engine = None):
        self.engine = engine if engine is not None else get_engine()

    def create_schema(self) -> None:
        """Crée la table des plannings si elle n'existe pas."""
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise ScheduleStorageError(f"Création du schéma impossible: {e}") from e

    # ------------------------------------------------------------------
    # Lectures
    # ------------------------------------------------------------------

    def find_by_time_range(self, start: datetime, end: datetime) -> List[Schedule]:
        """
        Plannings qui croisent [start, end] (bornes incluses) :
        start_time <= end ET end_time >= start.
        """
        if start is None or end is None or start > end:
            logger.warning(f"Plage horaire invalide pour la recherche: {start} -> {end}")
            return []

        t = schedules_table
        query = (
            select(t)
            .where(t.c.start_time <= end, t.c.end_time >= start)
            .order_by(t.c.start_time)
        )
        return self._read(query)

    def find_by_id(self, schedule_id: str) -> Optional[Schedule]:
        if not schedule_id or not schedule_id.strip():
            return None
        query = select(schedules_table).where(schedules_table.c.id == schedule_id)
        schedules = self._read(query)
        return schedules[0] if schedules else None

    def find_by_class_id(self, class_id: str) -> List[Schedule]:
        if not class_id or not class_id.strip():
            logger.info("Recherche par classe avec un identifiant vide")
            return []
        t = schedules_table
        query = select(t).where(t.c.class_id == class_id).order_by(t.c.start_time)
        return self._read(query)

    def find_all(self) -> List[Schedule]:
        return self._read(select(schedules_table).order_by(schedules_table.c.start_time))

    # ------------------------------------------------------------------
    # Écritures (une transaction par appel)
    # ------------------------------------------------------------------

    def save(self, schedule: Schedule) -> bool:
        row = self._schedule_to_row(schedule)
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(schedules_table).values(**row))
        except SQLAlchemyError as e:
            raise ScheduleStorageError(f"Insertion du planning {schedule.id} impossible: {e}") from e
        logger.debug(f"Planning {schedule.id} inséré")
        return True

    def update(self, schedule: Schedule) -> bool:
        row = self._schedule_to_row(schedule)
        schedule_id = row.pop("id")
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(schedules_table).where(schedules_table.c.id == schedule_id).values(**row)
                )
        except SQLAlchemyError as e:
            raise ScheduleStorageError(f"Mise à jour du planning {schedule_id} impossible: {e}") from e

        if result.rowcount == 0:
            logger.warning(f"Mise à jour sans effet : planning {schedule_id} introuvable")
            return False
        return True

    def delete(self, schedule_id: str) -> bool:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(delete(schedules_table).where(schedules_table.c.id == schedule_id))
        except SQLAlchemyError as e:
            raise ScheduleStorageError(f"Suppression du planning {schedule_id} impossible: {e}") from e
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Conversion lignes <-> modèles
    # ------------------------------------------------------------------

    def _read(self, query) -> List[Schedule]:
        try:
            with self.engine.connect() as conn:
                df = pd.read_sql(query, conn)
        # pandas peut ré-emballer l'erreur du driver dans pandas.errors.DatabaseError
        except (SQLAlchemyError, pd.errors.DatabaseError) as e:
            raise ScheduleStorageError(f"Lecture des plannings impossible: {e}") from e

        schedules = []
        for row in df.to_dict("records"):
            schedule = self._row_to_schedule(row)
            if schedule is not None:
                schedules.append(schedule)
        return schedules

    def _row_to_schedule(self, row: Dict[str, Any]) -> Optional[Schedule]:
        schedule_type = _clean(row.get("schedule_type"))
        common = {
            "id": _clean(row.get("id")),
            "name": _clean(row.get("name")) or "",
            "description": _clean(row.get("description")) or "",
            "start_datetime": _to_datetime(row.get("start_time")),
            "end_datetime": _to_datetime(row.get("end_time")),
            "teacher": _clean(row.get("teacher")),
            "class_id": _clean(row.get("class_id")),
        }

        if schedule_type == SCHEDULE_TYPE_ROOM:
            capacity = _clean(row.get("capacity"))
            return RoomSchedule(
                **common,
                room_id=_clean(row.get("room_id")),
                capacity=int(capacity) if capacity is not None else DEFAULT_CAPACITY,
                room_type=_clean(row.get("room_type")) or DEFAULT_ROOM_TYPE
            )
        if schedule_type == SCHEDULE_TYPE_GENERIC:
            return Schedule(**common)

        logger.warning(f"Type de planning inconnu '{schedule_type}' pour l'identifiant {common['id']}")
        return None

    def _schedule_to_row(self, schedule: Schedule) -> Dict[str, Any]:
        row = {
            "id": schedule.id,
            "name": schedule.name or "",
            "description": schedule.description,
            "teacher": schedule.teacher,
            "class_id": schedule.class_id,
            "start_time": schedule.start_datetime,
            "end_time": schedule.end_datetime,
            "schedule_type": SCHEDULE_TYPE_GENERIC,
            "room_id": None,
            "capacity": None,
            "room_type": None,
        }
        if isinstance(schedule, RoomSchedule):
            row.update({
                "schedule_type": SCHEDULE_TYPE_ROOM,
                "room_id": schedule.room_id,
                "capacity": schedule.capacity,
                "room_type": schedule.room_type,
            })
        return row
