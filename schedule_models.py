"""
Modèles de données pour les séances et les plannings persistés.
Respecte le principe Single Responsibility (SOLID).
"""
import datetime as dt
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Final, Optional

from time_slot import parse_time_slot

UNKNOWN: Final[str] = "Unknown"
NOT_AVAILABLE: Final[str] = "N/A"
DEFAULT_CAPACITY: Final[int] = 30
DEFAULT_ROOM_TYPE: Final[str] = "CLASSROOM"
WEEK_DAYS: Final[list] = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]


@dataclass
class Session:
    """Séance de cours telle que manipulée par les écrans (présences, examens, tableau de bord)."""
    id: Optional[str] = None
    course_name: str = UNKNOWN
    teacher: str = UNKNOWN
    room: str = NOT_AVAILABLE
    date: Optional[dt.date] = None
    time_slot: str = ""
    class_id: Optional[str] = None

    def _time_bounds(self):
        start, end, ok = parse_time_slot(self.time_slot)
        if not ok or self.date is None:
            return None, None
        return dt.datetime.combine(self.date, start), dt.datetime.combine(self.date, end)

    @property
    def start_datetime(self) -> Optional[dt.datetime]:
        return self._time_bounds()[0]

    @property
    def end_datetime(self) -> Optional[dt.datetime]:
        return self._time_bounds()[1]

    def has_id(self) -> bool:
        return bool(self.id and self.id.strip())

    def is_in_date_range(self, from_date: dt.date, to_date: dt.date) -> bool:
        """Bornes incluses. Une séance sans date n'est dans aucune plage."""
        if self.date is None:
            return False
        return from_date <= self.date <= to_date

    def is_taught_by(self, teacher_name: str) -> bool:
        return self.teacher is not None and self.teacher == teacher_name

    def duration_minutes(self) -> int:
        start, end = self._time_bounds()
        if start is None:
            return -1
        return int((end - start).total_seconds() // 60)

    def day_of_week(self) -> str:
        if self.date is None:
            return ""
        return WEEK_DAYS[self.date.weekday()]

    def summary(self) -> str:
        return " - ".join([
            self.course_name or NOT_AVAILABLE,
            self.teacher or NOT_AVAILABLE,
            self.room or NOT_AVAILABLE,
            self.time_slot,
        ])

    def copy(self) -> "Session":
        return replace(self)

    def to_dict(self) -> dict:
        """Convertit en dictionnaire pour compatibilité."""
        return {
            "id": self.id,
            "course_name": self.course_name,
            "teacher": self.teacher,
            "room": self.room,
            "date": self.date.isoformat() if self.date else None,
            "time_slot": self.time_slot,
            "class_id": self.class_id
        }


@dataclass
class Schedule:
    """
    Enregistrement générique persisté par le stockage.

    La description porte historiquement le nom de l'enseignant ("Teacher: {nom}") ;
    l'attribut teacher en est la version structurée.
    """
    id: str
    name: str = ""
    description: str = ""
    start_datetime: Optional[dt.datetime] = None
    end_datetime: Optional[dt.datetime] = None
    teacher: Optional[str] = None
    class_id: Optional[str] = None


@dataclass
class RoomSchedule(Schedule):
    """Réservation liée à une salle."""
    room_id: Optional[str] = None
    capacity: int = DEFAULT_CAPACITY
    room_type: str = DEFAULT_ROOM_TYPE

    def check_capacity(self, required_capacity: int) -> bool:
        return self.capacity >= required_capacity


class ConflictStatus(Enum):
    CONFLICT = "conflict"
    NO_CONFLICT = "no_conflict"
    INDETERMINATE = "indeterminate"


@dataclass
class ConflictResult:
    """Résultat d'une vérification de conflit de salle."""
    status: ConflictStatus
    conflicting_session: Optional[Session] = None
    reason: str = ""

    @property
    def is_conflict(self) -> bool:
        return self.status is ConflictStatus.CONFLICT


class OperationStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONVERSION_ERROR = "conversion_error"
    STORAGE_ERROR = "storage_error"


@dataclass
class Outcome:
    """Distingue un résultat vide d'un échec (stockage indisponible, entrée invalide...)."""
    status: OperationStatus
    value: Any = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.OK
