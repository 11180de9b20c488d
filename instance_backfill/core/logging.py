"""
Configuracion de loguru para el backfill.

El job corre desde consola (cron / a mano), asi que el sink principal es
stderr. Si LOG_FILE esta definido se agrega un archivo con rotacion para
conservar los diagnosticos de cada corrida.
"""
import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message}"


def configure_logging(level: str = "INFO", log_file: str = "") -> None:
    """
    Reinicia los sinks de loguru.

    Args:
        level: Nivel minimo (DEBUG muestra los updates generados)
        log_file: Ruta opcional de archivo de log
    """
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            format=LOG_FORMAT,
            rotation="50 MB",
            retention="30 days",
            level=level,
        )
