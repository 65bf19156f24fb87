# contactbook/logging_config.py

import logging


def setup_logging(level: str = "INFO") -> None:
    """Attach a console handler to the root logger, once.

    Calling it again (tests build many apps) leaves the existing handlers alone.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
