import logging

from pocketpet.constants import LOG_LEVEL


def configure_logging(level=None):
    """Single stream handler on the root logger; level from POCKETPET_LOG_LEVEL."""
    level = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
