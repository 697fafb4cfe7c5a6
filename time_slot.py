"""
Codec des créneaux horaires textuels "HH:MM - HH:MM".
Respecte le principe Single Responsibility (SOLID).

Un créneau mal formé n'est jamais une erreur : l'historique contient des
valeurs invalides, l'échec est donc signalé par un drapeau.
"""
from datetime import datetime, time
from typing import Final, Optional, Tuple

SEPARATOR: Final[str] = " - "
TIME_FORMAT: Final[str] = "%H:%M"
UNKNOWN: Final[str] = "Unknown"


def parse_time(text: str) -> Optional[time]:
    """'09:30' → time(9, 30), None si la valeur n'est pas une heure 24h valide."""
    if not isinstance(text, str):
        return None
    try:
        return datetime.strptime(text.strip(), TIME_FORMAT).time()
    except ValueError:
        return None


def parse_time_slot(text: str) -> Tuple[Optional[time], Optional[time], bool]:
    """
    Découpe un créneau sur le séparateur " - " et convertit chaque moitié.

    Args:
        text: Créneau au format "HH:MM - HH:MM"

    Returns:
        Tuple (début, fin, ok). En cas d'échec : (None, None, False)
    """
    if not isinstance(text, str):
        return None, None, False

    parts = text.split(SEPARATOR)
    if len(parts) != 2:
        return None, None, False

    start, end = parse_time(parts[0]), parse_time(parts[1])
    if start is None or end is None:
        return None, None, False
    return start, end, True


def format_time(value: Optional[time]) -> str:
    if value is None:
        return UNKNOWN
    return f"{value.hour:02d}:{value.minute:02d}"


def format_time_slot(start: Optional[time], end: Optional[time]) -> str:
    """
    Construit le créneau textuel. Une borne absente est rendue par "Unknown".

    Returns:
        Chaîne au format "HH:MM - HH:MM" (ex: "09:00 - Unknown")
    """
    return f"{format_time(start)}{SEPARATOR}{format_time(end)}"


def intervals_overlap(start1, end1, start2, end2) -> bool:
    """
    Chevauchement d'intervalles ouverts : deux séances consécutives
    (fin1 == début2) ne se chevauchent pas.
    Accepte des time ou des datetime, du moment que les quatre sont comparables.
    """
    return start1 < end2 and start2 < end1


class TimeSlotCodec:
    """Convertit les créneaux textuels en heures et inversement."""

    def parse(self, text: str) -> Tuple[Optional[time], Optional[time], bool]:
        return parse_time_slot(text)

    def format(self, start: Optional[time], end: Optional[time]) -> str:
        return format_time_slot(start, end)

    def overlaps(self, start1, end1, start2, end2) -> bool:
        return intervals_overlap(start1, end1, start2, end2)
