import logging
import os
import sys

from gamification.utils.constants import LOG_FORMAT


def setup_logging(level: int = logging.INFO):
    '''Configure root logger for the entire codebase.

    LOG_LEVEL (e.g. "DEBUG") in the environment wins over ``level``.
    '''
    override = os.getenv('LOG_LEVEL')
    if override:
        level = logging.getLevelName(override.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
