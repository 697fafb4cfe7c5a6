"""
Interfaces (abstractions) pour la gestion des séances et des salles.
Respecte le Dependency Inversion Principle (SOLID).

Le gestionnaire de séances dépend de ces abstractions,
pas des implémentations concrètes (SQL, cache, codec).

Utilise Protocol (PEP 544) pour le structural subtyping (duck typing),
ce qui est plus pythonique et moins intrusif que ABC.
"""
from datetime import datetime, time
from typing import Protocol, List, Optional, Tuple

from schedule_models import Schedule, Session


# ==============================================================================
# INTERFACE DU STOCKAGE
# ==============================================================================

class IScheduleRepository(Protocol):
    """Interface du stockage des plannings. Chaque appel gère sa propre connexion."""

    def find_by_time_range(self, start: datetime, end: datetime) -> List[Schedule]:
        """Retourne les plannings dont l'intervalle croise [start, end]."""
        ...

    def find_by_id(self, schedule_id: str) -> Optional[Schedule]:
        """Retourne le planning correspondant, None s'il n'existe pas."""
        ...

    def find_by_class_id(self, class_id: str) -> List[Schedule]:
        """Retourne les plannings d'une classe (cohorte)."""
        ...

    def find_all(self) -> List[Schedule]:
        """Retourne tous les plannings."""
        ...

    def save(self, schedule: Schedule) -> bool:
        """Insère un planning."""
        ...

    def update(self, schedule: Schedule) -> bool:
        """Remplace un planning existant."""
        ...

    def delete(self, schedule_id: str) -> bool:
        """Supprime un planning."""
        ...


# ==============================================================================
# INTERFACES POUR LA CONVERSION
# ==============================================================================

class ITimeSlotCodec(Protocol):
    """Interface pour le codage des créneaux horaires."""

    def parse(self, text: str) -> Tuple[Optional[time], Optional[time], bool]:
        """Convertit "HH:MM - HH:MM" en (début, fin, ok)."""
        ...

    def format(self, start: Optional[time], end: Optional[time]) -> str:
        """Convertit deux heures en "HH:MM - HH:MM"."""
        ...


class ISessionMapper(Protocol):
    """Interface pour la conversion séance <-> planning."""

    def to_schedule(self, session: Session) -> Optional[Schedule]:
        ...

    def to_session(self, schedule: Schedule) -> Optional[Session]:
        ...


# ==============================================================================
# INTERFACE DU CACHE
# ==============================================================================

class ISessionCache(Protocol):
    """Interface du cache des séances indexé par identifiant."""

    def get(self, session_id: str) -> Optional[Session]:
        ...

    def put(self, session: Session) -> None:
        ...

    def evict(self, session_id: str) -> None:
        ...
