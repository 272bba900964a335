import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the gateway.

    Safe to call on every cold start; `force=True` replaces handlers the
    serverless runtime may have installed.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
