"""LogEventReporter — reports guard events via logging."""

import logging
from typing import Optional

from ports.events import EventReporterPort

logger = logging.getLogger(__name__)

_ERROR_EVENTS = {"store_unavailable"}


class LogEventReporter(EventReporterPort):
    def report(
        self,
        event: str,
        identity: str,
        detail: Optional[str] = None,
    ) -> None:
        msg = f"[{identity}] {event}"
        if detail:
            msg += f": {detail}"
        if event in _ERROR_EVENTS:
            logger.error(msg)
        else:
            logger.warning(msg)
