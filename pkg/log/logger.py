import logging


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Stream logger with the service-wide `[time] [LEVEL] [name]: message` format."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level.upper())
    return logger
