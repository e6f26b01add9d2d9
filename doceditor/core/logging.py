import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Настройка корневого логгера приложения"""
    logger = logging.getLogger("doceditor")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_doceditor", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._doceditor = True
        logger.addHandler(handler)
