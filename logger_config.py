"""
Module de configuration centralisée pour le logging de la gestion des séances.
Chaque module récupère son logger via get_logger(__name__).
"""
import logging
import logging.handlers
import os
from pathlib import Path


# Dossier pour les logs (surchargeable via SCHEDULE_LOG_DIR)
LOGS_DIR = Path(os.getenv('SCHEDULE_LOG_DIR', Path(__file__).parent / "logs"))
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def _rotating_handler(filename: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        LOGS_DIR / filename,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configure et retourne un logger avec handlers console et fichier.

    Args:
        name: Nom du logger (généralement __name__ du module)
        level: Niveau minimal affiché sur la console

    Returns:
        Logger configuré
    """
    logger = logging.getLogger(name)

    # Évite de dupliquer les handlers si le logger existe déjà
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Log général + log des erreurs uniquement
    logger.addHandler(_rotating_handler("application.log", logging.DEBUG, formatter))
    logger.addHandler(_rotating_handler("errors.log", logging.ERROR, formatter))

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Récupère ou crée un logger pour le module spécifié.

    Usage:
        from logger_config import get_logger
        logger = get_logger(__name__)
        logger.warning("Créneau horaire invalide")

    Args:
        name: Nom du module (utiliser __name__)

    Returns:
        Logger configuré
    """
    return setup_logger(name)
