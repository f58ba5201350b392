import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
NOISY_LOGGERS = ("urllib3", "requests", "watchdog")


def configure_logging(level_name=None):
    """Configure the root logger once per process; Streamlit reruns are no-ops."""
    level_name = (level_name or os.getenv("DASHBOARD_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("dashboard").setLevel(level)
    return level
