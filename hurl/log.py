"""hurl logging setup."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def log_level(verbosity: int, quiet: bool = False) -> int:
    """Quiet overrides any verbosity."""
    if quiet:
        return logging.ERROR
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    level = log_level(verbosity, quiet)
    logger = logging.getLogger("hurl")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level)

    # -vvv also shows the transport's connection logging
    if verbosity >= 3 and not quiet:
        urllib3_logger = logging.getLogger("urllib3")
        urllib3_logger.setLevel(logging.DEBUG)
        if logger.handlers[0] not in urllib3_logger.handlers:
            urllib3_logger.addHandler(logger.handlers[0])

    return logger
