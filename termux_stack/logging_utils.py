from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = os.path.join("~", "www", "logs", "termux-stack.log")


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    All installer and lifecycle decisions are recorded next to the server logs
    (~/www/logs) so that ``monitor_server.sh`` users find them in one place.

    Notes:
    - On a fresh device ~/www does not exist yet; the directory is created.
    - If the location is not writable we fall back to a file in the current
      working directory and still report the requested path.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    if getattr(logger, "_termux_stack_configured", False):
        return getattr(logger, "_termux_stack_log_path", log_path)

    requested = os.path.expanduser(log_path)
    chosen_path = requested
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested)
    except OSError:
        chosen_path = str(Path.cwd() / "termux-stack.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_termux_stack_configured", True)
    setattr(logger, "_termux_stack_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", requested, chosen_path
    )
    return chosen_path
