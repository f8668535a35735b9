"""Core infrastructure components."""

from neighborguard.core.config import Settings, get_settings
from neighborguard.core.database import (
    close_db,
    get_db,
    get_session_factory,
    init_db,
)
from neighborguard.core.logging import (
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)

__all__ = [
    "Settings",
    "close_db",
    "get_db",
    "get_logger",
    "get_request_id",
    "get_session_factory",
    "get_settings",
    "init_db",
    "set_request_id",
    "setup_logging",
]
