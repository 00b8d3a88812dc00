import logging
import sys

from satellite.utils.logging_redaction import install_redaction_filter

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that drown out the tracker at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "apscheduler", "httpx")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the API process and the standalone scheduler.
    Unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    install_redaction_filter()

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
