"""
Logging setup for applications using orbsens.

Library modules only create module-level loggers under the ``orbsens``
namespace and never configure logging. A script or estimation run calls
:func:`setup_logging` once to route those messages to the console and,
optionally, to a file.
"""

import logging
import logging.config
from pathlib import Path

_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(level=logging.INFO, log_file=None, variational_level=None):
    """
    Route the ``orbsens`` loggers to the console and an optional log file.

    Parameters
    ----------
    level : int or str, optional
        Level of the ``orbsens`` logger. Default is logging.INFO.
    log_file : str or Path, optional
        File receiving the same messages as the console; its directory is
        created if needed. No file is written when None.
    variational_level : int or str, optional
        Separate level for ``orbsens.algorithms.variational``. "DEBUG" logs
        every update of the partials, i.e. one message per integrator stage.
        Inherits ``level`` when None.
    """
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'orbsens',
            'stream': 'ext://sys.stdout',
        },
    }
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.FileHandler',
            'formatter': 'orbsens',
            'filename': str(log_file),
            'encoding': 'utf8',
        }

    loggers = {
        'orbsens': {
            'handlers': list(handlers),
            'level': level,
            'propagate': False,
        },
    }
    if variational_level is not None:
        loggers['orbsens.algorithms.variational'] = {'level': variational_level}

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'orbsens': {'format': _FORMAT, 'datefmt': '%Y-%m-%d %H:%M:%S'}},
        'handlers': handlers,
        'loggers': loggers,
    })
