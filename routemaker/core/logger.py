"""Project-wide logger.

Every module logs through ``routemaker_logger`` with a short message and a
structured ``extra`` dict; the JSON formatter lifts the extras into the record.
"""

import logging
import os

from pythonjsonlogger.json import JsonFormatter

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()


def _build_logger() -> logging.Logger:
    logger = logging.getLogger('routemaker')
    log_level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }
    logger.setLevel(log_level_map.get(LOG_LEVEL, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            JsonFormatter(
                '%(asctime)s %(levelname)s %(name)s %(message)s',
                rename_fields={'asctime': 'timestamp', 'levelname': 'level'},
                datefmt='%Y-%m-%d %H:%M:%S',
            )
        )
        logger.addHandler(handler)
        logger.propagate = False

    return logger


routemaker_logger = _build_logger()
