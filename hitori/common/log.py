"""Logging setup for the CLI entry point."""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Log to stderr, and to ``log_file`` when one is given.

    stderr only shows warnings unless ``verbose`` is set; the log file
    keeps INFO and above.
    """
    stream = logging.StreamHandler()
    stream.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handlers: list[logging.Handler] = [stream]

    file_error = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            file_error = e
        else:
            file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    if file_error is not None:
        logging.getLogger(__name__).warning(f"Not logging to {log_file}: {file_error}")
