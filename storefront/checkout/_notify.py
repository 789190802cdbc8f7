"""
Notifier — transient user-visible notices.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger("storefront.notices")


class Notifier(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Default notifier: notices go to the `storefront.notices` logger."""

    def info(self, message: str) -> None:
        logger.info(message)

    def success(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)


__all__ = ("Notifier", "LogNotifier")
