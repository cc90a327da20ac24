"""
Logging setup for batch runs.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = 'INFO') -> logging.Logger:
    """
    Configure root logging with a single stream handler.

    Args:
        level: Level name ('DEBUG', 'INFO', ...)

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    # One plain stream handler at a time
    for existing in root.handlers[:]:
        if type(existing) is logging.StreamHandler:
            root.removeHandler(existing)
    root.addHandler(handler)

    # trimesh logs every mesh repair at INFO
    logging.getLogger('trimesh').setLevel(logging.WARNING)
    return root
