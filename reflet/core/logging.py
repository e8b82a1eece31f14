# reflet/core/logging.py
import logging
from typing import Optional

ISO_FMT = "%Y-%m-%dT%H:%M:%S%z"

# chatty third-party loggers: storage uploads (google/urllib3) and bcrypt backend probing
QUIET_LOGGERS = ("urllib3", "google.auth", "google.cloud", "passlib", "PIL", "httpx")


def configure_logging(level: Optional[int] = None, debug: bool = False) -> None:
    if level is None:
        level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
        datefmt=ISO_FMT,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
