"""
Console logging for the API process.

``setup_logging`` attaches one stream handler to the root logger.  It is a
no-op when the root logger already has handlers, so repeated
``create_app`` calls (tests, reloads) do not duplicate output.
"""
import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a console handler."""
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
