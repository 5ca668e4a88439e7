"""
Logging configuration for hybrid_crn.

Modules obtain their logger with ``get_logger(__name__)``; nothing is printed
until ``configure_logging`` is called (or the host application configures the
``hybrid_crn`` logger itself).
"""
import logging
import logging.config


def configure_logging(level="INFO"):
    """
    Configure console logging for the ``hybrid_crn`` logger tree.

    Parameters
    ----------
    level : str, optional
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Default is INFO.
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "formatter": "basic",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": level,
            }
        },
        "loggers": {
            "hybrid_crn": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(config)


def get_logger(module):
    """Return the logger for ``module`` (typically ``__name__``)."""
    return logging.getLogger(module)
