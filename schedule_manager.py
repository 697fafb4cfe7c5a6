"""
Gestionnaire des séances : point d'entrée unique pour les écrans
(présences, examens, tableau de bord).

Aucune opération ne lève d'exception vers l'appelant : un échec du stockage
donne une liste vide, False ou None, et est journalisé.
Le gestionnaire est prévu pour un seul thread appelant (thread de l'interface) ;
seul le cache est protégé contre les accès concurrents.
"""
import uuid
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from conflict_checker import ConflictChecker
from interfaces import IScheduleRepository, ISessionCache, ISessionMapper
from logger_config import get_logger
from schedule_models import ConflictResult, ConflictStatus, OperationStatus, Outcome, Schedule, Session
from session_cache import SessionCache
from session_mapper import SessionMapper

logger = get_logger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    """Valeurs non vides, sans doublon, dans l'ordre de première apparition."""
    return list(dict.fromkeys(v for v in values if not _is_blank(v)))


class ScheduleManager:
    """Orchestre cache, conversion, stockage et détection de conflits."""

    def __init__(self, repository: IScheduleRepository,
                 mapper: ISessionMapper = None,
                 cache: ISessionCache = None,
                 conflict_checker: ConflictChecker = None):
        self._repository = repository
        self._mapper = mapper or SessionMapper()
        self._cache = cache if cache is not None else SessionCache()
        self._conflict_checker = conflict_checker or ConflictChecker(repository, self._mapper)

    # ------------------------------------------------------------------
    # Lectures
    # ------------------------------------------------------------------

    def get_schedule(self, from_date: date, to_date: date, teacher_name: str = None) -> List[Session]:
        """
        Séances dont la date est comprise dans [from_date, to_date].

        Args:
            from_date: Premier jour (inclus)
            to_date: Dernier jour (inclus)
            teacher_name: Filtre optionnel (insensible à la casse)

        Returns:
            Liste des séances, vide en cas d'erreur
        """
        if from_date is None or to_date is None:
            logger.warning("Lecture du planning demandée avec une date absente")
            return []

        start = datetime.combine(from_date, time.min)
        end = datetime.combine(to_date + timedelta(days=1), time.min)

        sessions = self._load(
            lambda: self._repository.find_by_time_range(start, end),
            f"plage {from_date} -> {to_date}"
        )
        sessions = [s for s in sessions if s.is_in_date_range(from_date, to_date)]

        if not _is_blank(teacher_name):
            wanted = str(teacher_name).strip().lower()
            sessions = [s for s in sessions if s.teacher is not None and s.teacher.lower() == wanted]
        return sessions

    def get_session_by_id(self, session_id: str) -> Optional[Session]:
        """Séance depuis le cache, sinon depuis le stockage. None si introuvable."""
        return self.find_session(session_id).value

    def find_session(self, session_id: str) -> Outcome:
        """
        Comme get_session_by_id, mais distingue une séance absente
        d'un identifiant invalide ou d'un stockage indisponible.
        """
        if _is_blank(session_id):
            logger.warning("Recherche d'une séance avec un identifiant vide")
            return Outcome(OperationStatus.INVALID_INPUT, error="identifiant vide")

        cached = self._cache.get(session_id)
        if cached is not None:
            return Outcome(OperationStatus.OK, cached)

        try:
            schedule = self._repository.find_by_id(session_id)
        except Exception as e:
            logger.error(f"Erreur lors de la lecture de la séance {session_id}: {e}", exc_info=True)
            return Outcome(OperationStatus.STORAGE_ERROR, error=str(e))

        if schedule is None:
            return Outcome(OperationStatus.NOT_FOUND)

        session = self._mapper.to_session(schedule)
        if session is None:
            logger.warning(f"Planning {session_id} non convertible en séance")
            return Outcome(OperationStatus.CONVERSION_ERROR, error="conversion impossible")

        if session.has_id():
            self._cache.put(session)
        else:
            logger.warning(f"Séance lue sans identifiant, non mise en cache (demande: {session_id})")
        return Outcome(OperationStatus.OK, session)

    def get_sessions_by_teacher(self, teacher_name: str) -> List[Session]:
        """Toutes les séances d'un enseignant (correspondance exacte)."""
        if _is_blank(teacher_name):
            logger.warning("Recherche des séances avec un nom d'enseignant vide")
            return []
        sessions = self._load(self._repository.find_all, f"enseignant {teacher_name}")
        return [s for s in sessions if s.is_taught_by(teacher_name)]

    def get_sessions_by_date(self, day: date) -> List[Session]:
        if day is None:
            logger.warning("Recherche des séances avec une date absente")
            return []
        return self.get_schedule(day, day)

    def get_class_sessions_by_class_id(self, class_id: str) -> List[Session]:
        if _is_blank(class_id):
            logger.warning("Recherche des séances avec un identifiant de classe vide")
            return []
        return self._load(lambda: self._repository.find_by_class_id(class_id), f"classe {class_id}")

    def get_teachers(self) -> List[str]:
        return _distinct(s.teacher for s in self._load_all_for("enseignants"))

    def get_personnel(self) -> List[str]:
        """Alias de get_teachers conservé pour les anciens écrans."""
        return self.get_teachers()

    def get_rooms(self) -> List[str]:
        return _distinct(s.room for s in self._load_all_for("salles"))

    def get_courses(self) -> List[str]:
        return _distinct(s.course_name for s in self._load_all_for("cours"))

    # ------------------------------------------------------------------
    # Écritures
    # ------------------------------------------------------------------

    def add_session(self, session: Session) -> bool:
        """
        Persiste une nouvelle séance. Un identifiant UUID est attribué s'il manque.

        Returns:
            True si la séance a été enregistrée
        """
        if session is None:
            logger.warning("Tentative d'ajout d'une séance absente")
            return False

        if session.has_id():
            logger.info(f"Ajout d'une séance avec un identifiant existant: {session.id}")
            to_save = session
        else:
            to_save = session.copy()
            to_save.id = str(uuid.uuid4())

        if not self._write(to_save, self._repository.save, "ajout"):
            return False

        # L'identifiant n'est reporté sur l'objet appelant qu'après succès
        session.id = to_save.id
        self._cache.put(session)
        return True

    def update_session(self, session: Session) -> bool:
        """Réécrit le planning complet d'une séance existante."""
        if session is None or not session.has_id():
            logger.warning("Tentative de mise à jour d'une séance sans identifiant")
            return False

        if not self._write(session, self._repository.update, "mise à jour"):
            return False
        self._cache.put(session)
        return True

    def delete_session(self, session_id: str) -> bool:
        if _is_blank(session_id):
            logger.warning("Tentative de suppression d'une séance sans identifiant")
            return False
        try:
            deleted = self._repository.delete(session_id)
        except Exception as e:
            logger.error(f"Erreur lors de la suppression de la séance {session_id}: {e}", exc_info=True)
            return False

        if deleted:
            self._cache.evict(session_id)
        return bool(deleted)

    # ------------------------------------------------------------------
    # Conflits
    # ------------------------------------------------------------------

    def has_schedule_conflict(self, session: Session) -> bool:
        """
        Vrai si la séance chevauche une autre séance de la même salle le même jour.
        Toute erreur ou séance incomplète donne False (pas de blocage de l'écriture).
        """
        try:
            return self._conflict_checker.has_conflict(session)
        except Exception as e:
            logger.error(f"Erreur inattendue lors de la vérification des conflits: {e}", exc_info=True)
            return False

    def check_conflict(self, session: Session) -> ConflictResult:
        """Résultat à trois états ; la politique en cas d'indétermination revient à l'appelant."""
        try:
            return self._conflict_checker.check(session)
        except Exception as e:
            logger.error(f"Erreur inattendue lors de la vérification des conflits: {e}", exc_info=True)
            return ConflictResult(ConflictStatus.INDETERMINATE, reason=str(e))

    # ------------------------------------------------------------------
    # Outils internes
    # ------------------------------------------------------------------

    def _write(self, session: Session, operation: Callable[[Schedule], bool], label: str) -> bool:
        schedule = self._mapper.to_schedule(session)
        if schedule is None:
            logger.warning(f"Échec de l'{label} : séance {session.id} non convertible")
            return False
        try:
            return bool(operation(schedule))
        except Exception as e:
            logger.error(f"Erreur lors de l'{label} de la séance {session.id}: {e}", exc_info=True)
            return False

    def _load(self, fetch: Callable[[], List[Schedule]], context: str) -> List[Session]:
        """Charge, convertit et met en cache ; les plannings non convertibles sont ignorés."""
        try:
            schedules = fetch()
        except Exception as e:
            logger.error(f"Erreur lors du chargement des séances ({context}): {e}", exc_info=True)
            return []

        sessions = []
        for schedule in schedules or []:
            session = self._mapper.to_session(schedule)
            if session is None:
                logger.warning(f"Planning ignoré ({context}) : conversion impossible")
                continue
            self._cache.put(session)
            sessions.append(session)
        return sessions

    def _load_all_for(self, label: str) -> List[Session]:
        # Pas de requête d'agrégat dédiée : tout est chargé puis projeté
        return self._load(self._repository.find_all, f"liste des {label}")
