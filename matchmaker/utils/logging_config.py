"""Logging and optional LangSmith tracing for the matchmaking service."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from matchmaker.config import config


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_PATH = "logs/matchmaker.log"

# Client libraries that log every request at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "google", "grpc")


def setup_logging(*, debug: bool = False, log_file: str | None = LOG_FILE_PATH) -> None:
    """Configure the root logger.

    Console gets INFO (DEBUG with ``debug=True``). When ``log_file`` is set,
    a rotating file additionally keeps everything at DEBUG.
    """

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    console.setFormatter(formatter)
    handlers.append(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        rotating = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=5)
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(formatter)
        handlers.append(rotating)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    # uvicorn --reload imports the app again; don't stack handlers.
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_langsmith() -> bool:
    """Turn on LangSmith tracing of the graphs when configured.

    Returns True when tracing was enabled.
    """

    if not config.LANGSMITH_ENABLED or not config.LANGSMITH_API_KEY:
        return False

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = config.LANGSMITH_API_KEY
    os.environ.setdefault("LANGSMITH_PROJECT", "matchmaker")

    try:
        from langsmith import Client

        Client()
    except Exception as exc:  # pragma: no cover - optional dependency
        logger.warning("LangSmith initialization failed: %s", exc)
        return False

    logger.info("LangSmith tracing enabled (project=%s)", os.environ["LANGSMITH_PROJECT"])
    return True


logger = logging.getLogger("matchmaker")
