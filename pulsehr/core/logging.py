import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once (stdout).
    Modules then log through logging.getLogger(__name__).
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_pulsehr", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pulsehr = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # uvicorn keeps its own handlers, only align the level
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level.upper())

    # SQLAlchemy is very chatty in DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
