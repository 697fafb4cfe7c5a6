"""
Cache en mémoire des séances, indexé par identifiant.

Peuplé uniquement par les lectures et écritures du gestionnaire de séances :
une écriture externe dans la base n'invalide pas le cache.
Pas de borne de taille, les entrées vivent autant que le gestionnaire.
Le cache conserve et rend des copies : modifier une séance lue ne change
l'entrée qu'après un passage par update_session.
"""
import threading
from typing import Dict, Optional

from schedule_models import Session


class SessionCache:
    """Cache lecture/écriture des séances, protégé par un verrou."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[Session]:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
        return session.copy() if session is not None else None

    def put(self, session: Session) -> None:
        """Ignore les séances sans identifiant."""
        if session is None or not session.has_id():
            return
        with self._lock:
            self._sessions[session.id] = session.copy()

    def evict(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
