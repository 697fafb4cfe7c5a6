"""
Convertisseur entre les séances (Session) et les plannings persistés (Schedule).
Respecte le principe Single Responsibility (SOLID).
"""
from datetime import datetime, time
from typing import Final, Optional

from interfaces import ITimeSlotCodec
from logger_config import get_logger
from schedule_models import (
    DEFAULT_CAPACITY, DEFAULT_ROOM_TYPE, NOT_AVAILABLE, UNKNOWN,
    RoomSchedule, Schedule, Session,
)
from time_slot import TimeSlotCodec

logger = get_logger(__name__)

TEACHER_MARKER: Final[str] = "Teacher:"


def encode_teacher(teacher: Optional[str]) -> str:
    """'Ms. Lee' → 'Teacher: Ms. Lee'"""
    name = teacher.strip() if teacher and teacher.strip() else UNKNOWN
    return f"{TEACHER_MARKER} {name}"


def decode_teacher(description: Optional[str]) -> str:
    """Récupère le nom après le dernier marqueur 'Teacher:', 'Unknown' sinon."""
    if not description or TEACHER_MARKER not in description:
        return UNKNOWN
    name = description.split(TEACHER_MARKER)[-1].strip()
    return name or UNKNOWN


class SessionMapper:
    """Convertit les séances en plannings de salle et inversement."""

    def __init__(self, codec: ITimeSlotCodec = None):
        self._codec = codec or TimeSlotCodec()

    def to_schedule(self, session: Session) -> Optional[RoomSchedule]:
        """
        Construit le planning de salle à persister pour une séance.

        Args:
            session: Séance complète (l'identifiant est obligatoire)

        Returns:
            RoomSchedule, ou None si la séance ne peut pas être persistée
        """
        if session is None or not session.has_id():
            logger.warning("Séance sans identifiant : conversion en planning impossible")
            return None

        start_dt, end_dt = self._build_datetimes(session)
        room = session.room if session.room and session.room.strip() else UNKNOWN
        teacher = session.teacher.strip() if session.teacher and session.teacher.strip() else UNKNOWN

        # capacity / room_type ne sont pas portés par la séance
        return RoomSchedule(
            id=session.id,
            name=session.course_name or "",
            description=encode_teacher(teacher),
            start_datetime=start_dt,
            end_datetime=end_dt,
            teacher=teacher,
            class_id=session.class_id,
            room_id=room,
            capacity=DEFAULT_CAPACITY,
            room_type=DEFAULT_ROOM_TYPE
        )

    def to_session(self, schedule: Schedule) -> Optional[Session]:
        """
        Reconstruit une séance depuis un planning persisté.

        Un planning sans identifiant donne tout de même une séance au mieux ;
        l'appelant ne doit pas supposer que session.id est renseigné.
        """
        if schedule is None:
            return None

        if not schedule.id or not str(schedule.id).strip():
            logger.warning(f"Planning '{schedule.name}' sans identifiant, séance partielle")

        start_dt, end_dt = schedule.start_datetime, schedule.end_datetime
        time_slot = self._codec.format(
            start_dt.time() if start_dt is not None else None,
            end_dt.time() if end_dt is not None else None
        )

        return Session(
            id=schedule.id,
            course_name=schedule.name,
            teacher=self._recover_teacher(schedule),
            room=self._recover_room(schedule),
            date=start_dt.date() if start_dt is not None else None,
            time_slot=time_slot,
            class_id=schedule.class_id
        )

    def _build_datetimes(self, session: Session):
        """Date de la séance + bornes du créneau, minuit si le créneau est invalide."""
        if session.date is None:
            logger.warning(f"Séance {session.id} sans date : horaires non renseignés")
            return None, None

        start, end, ok = self._codec.parse(session.time_slot)
        if not ok:
            logger.warning(
                f"Créneau invalide '{session.time_slot}' pour la séance {session.id}, "
                f"utilisation de minuit par défaut"
            )
            start = end = time.min

        return datetime.combine(session.date, start), datetime.combine(session.date, end)

    def _recover_teacher(self, schedule: Schedule) -> str:
        if schedule.teacher and schedule.teacher.strip():
            return schedule.teacher.strip()
        return decode_teacher(schedule.description)

    def _recover_room(self, schedule: Schedule) -> str:
        room_id = getattr(schedule, 'room_id', None)
        if room_id and str(room_id).strip():
            return str(room_id)
        return NOT_AVAILABLE
