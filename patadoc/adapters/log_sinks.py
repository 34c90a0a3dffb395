"""
Logging-backed collaborators for the submission client.

Stand-ins for a browser analytics layer and a screen reader live region
when the controller runs outside a page (CLI, tests).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from patadoc.components.submission import Priority

logger = logging.getLogger(__name__)


@dataclass
class LoggingAnalyticsSink:
    """Logs each analytics event and keeps it for inspection."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def track(self, event: str, data: dict[str, Any]) -> None:
        self.events.append((event, data))
        logger.info("Analytics event tracked: %s %s", event, data)

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@dataclass
class LoggingAnnouncer:
    """Logs announcements and keeps them for inspection."""

    announcements: list[tuple[str, Priority]] = field(default_factory=list)

    def announce(self, message: str, priority: Priority = Priority.POLITE) -> None:
        self.announcements.append((message, priority))
        logger.info("Announce (%s): %s", priority.value, message)

