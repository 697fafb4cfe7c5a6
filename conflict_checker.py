"""
Détection des conflits de salle entre séances.

Unique implémentation de la règle de conflit : même salle (égalité exacte),
même date, créneaux qui se chevauchent en intervalles ouverts.
Une séance terminant à 10:00 et une autre commençant à 10:00 ne sont pas en conflit.
"""
from datetime import date, datetime
from typing import Iterator, List, Optional, Tuple

from interfaces import IScheduleRepository, ISessionMapper
from logger_config import get_logger
from schedule_models import ConflictResult, ConflictStatus, Session
from session_mapper import SessionMapper
from time_slot import intervals_overlap, parse_time_slot

logger = get_logger(__name__)


def sessions_conflict(first: Session, second: Session) -> bool:
    """Vrai si les deux séances occupent la même salle au même moment."""
    if first is None or second is None:
        return False
    if first.room is None or first.room != second.room:
        return False
    if first.date is None or first.date != second.date:
        return False

    start1, end1, ok1 = parse_time_slot(first.time_slot)
    start2, end2, ok2 = parse_time_slot(second.time_slot)
    if not (ok1 and ok2):
        return False
    return intervals_overlap(start1, end1, start2, end2)


class ConflictChecker:
    """Vérifie qu'une réservation candidate ne chevauche aucune réservation de la même salle."""

    def __init__(self, repository: IScheduleRepository, mapper: ISessionMapper = None):
        self._repository = repository
        self._mapper = mapper or SessionMapper()

    def check(self, candidate: Session) -> ConflictResult:
        """
        Vérifie une séance candidate contre le stockage.

        Returns:
            ConflictResult : CONFLICT avec la première séance en conflit,
            NO_CONFLICT, ou INDETERMINATE si la candidate est incomplète
            ou si le stockage a échoué.
        """
        window, reason = self._candidate_window(candidate)
        if window is None:
            logger.warning(f"Vérification de conflit ignorée : {reason}")
            return ConflictResult(ConflictStatus.INDETERMINATE, reason=reason)

        try:
            conflict = next(self._iter_conflicts(candidate, window), None)
        except Exception as e:
            logger.error(f"Erreur lors de la vérification des conflits de la séance {candidate.id}: {e}",
                         exc_info=True)
            return ConflictResult(ConflictStatus.INDETERMINATE, reason=str(e))

        if conflict is None:
            return ConflictResult(ConflictStatus.NO_CONFLICT)

        logger.info(
            f"Conflit trouvé pour la séance {candidate.id} avec la séance {conflict.id} "
            f"en salle {candidate.room}"
        )
        return ConflictResult(ConflictStatus.CONFLICT, conflicting_session=conflict,
                              reason=f"Salle {candidate.room} déjà réservée ({conflict.time_slot})")

    def has_conflict(self, candidate: Session) -> bool:
        """Version booléenne : un résultat indéterminé est traité comme absence de conflit."""
        return self.check(candidate).status is ConflictStatus.CONFLICT

    def find_conflicts(self, candidate: Session) -> List[Session]:
        """
        Retourne toutes les séances en conflit avec la candidate.
        Les erreurs du stockage sont propagées à l'appelant.
        """
        window, reason = self._candidate_window(candidate)
        if window is None:
            logger.warning(f"Recherche de conflits ignorée : {reason}")
            return []
        return list(self._iter_conflicts(candidate, window))

    def _candidate_window(self, candidate: Session) -> Tuple[Optional[Tuple[datetime, datetime]], str]:
        """Intervalle de la candidate, ou (None, raison) si elle est incomplète."""
        if candidate is None:
            return None, "séance absente"
        if not isinstance(candidate.date, date):
            return None, f"séance {candidate.id} sans date valide"
        if not isinstance(candidate.room, str) or not candidate.room.strip():
            return None, f"séance {candidate.id} sans salle valide"

        start, end, ok = parse_time_slot(candidate.time_slot)
        if not ok:
            return None, f"créneau invalide '{candidate.time_slot}' pour la séance {candidate.id}"

        return (datetime.combine(candidate.date, start), datetime.combine(candidate.date, end)), ""

    def _iter_conflicts(self, candidate: Session, window: Tuple[datetime, datetime]) -> Iterator[Session]:
        for schedule in self._repository.find_by_time_range(*window):
            if schedule is None:
                continue
            # Une séance n'entre jamais en conflit avec elle-même (mise à jour sur place)
            if candidate.has_id() and schedule.id == candidate.id:
                continue

            existing = self._mapper.to_session(schedule)
            if existing is None:
                logger.warning(f"Planning {schedule.id} non convertible, ignoré")
                continue

            if sessions_conflict(candidate, existing):
                yield existing
