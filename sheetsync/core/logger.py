import logging

from sheetsync.core.config import LOG_LEVEL


logger = logging.getLogger("sheetsync")

if not logger.handlers:

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )

    logger.addHandler(handler)

logger.setLevel(LOG_LEVEL)
