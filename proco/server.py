"""
Process bootstrap: pick a free port and serve the app with uvicorn.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import Optional

import uvicorn

from proco.app import create_app
from proco.config import Settings, get_settings

logger = logging.getLogger(__name__)


class NoAvailablePortError(RuntimeError):
    """Raised when every port in the search window is taken."""


def is_port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as candidate:
        # Match uvicorn, so ports in TIME_WAIT count as free.
        candidate.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            candidate.bind((host, port))
        except OSError:
            return True
    return False


def find_available_port(host: str, start_port: int, max_attempts: int = 10) -> int:
    """
    Return the first free port starting at `start_port`, trying the next
    port up on each conflict.
    """
    port = start_port
    for _ in range(max_attempts):
        if not is_port_in_use(host, port):
            return port
        logger.info("Port %d is in use, trying %d", port, port + 1)
        port += 1
    raise NoAvailablePortError(
        f"Could not find an available port after {max_attempts} attempts."
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run(
    settings: Optional[Settings] = None,
    *,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    host = host or settings.host
    try:
        port = find_available_port(
            host, port or settings.port, settings.max_port_attempts
        )
    except NoAvailablePortError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logger.info("Server running on port %d", port)
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_config=None)
