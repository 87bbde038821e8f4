"""Event reporting for scenario runs."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from models.events import EventType, ScenarioEvent

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    EventType.info: logging.INFO,
    EventType.success: logging.INFO,
    EventType.error: logging.WARNING,
    EventType.failure: logging.ERROR,
}


class Reporter:
    """Logs scenario events and keeps them in order for the final result."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.events: List[ScenarioEvent] = []

    def info(self, message: str, **data: Any) -> ScenarioEvent:
        return self.report(ScenarioEvent(type=EventType.info, message=message, data=data))

    def success(self, message: str, **data: Any) -> ScenarioEvent:
        return self.report(
            ScenarioEvent(type=EventType.success, message=message, data=data)
        )

    def error(
        self, message: str, exception: Optional[BaseException] = None, **data: Any
    ) -> ScenarioEvent:
        return self.report(
            ScenarioEvent(
                type=EventType.error,
                message=message,
                exception=_describe(exception),
                data=data,
            )
        )

    def failure(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        findings: Optional[Dict[str, str]] = None,
        **data: Any,
    ) -> ScenarioEvent:
        if findings:
            data = {**data, "findings": dict(findings)}
        return self.report(
            ScenarioEvent(
                type=EventType.failure,
                message=message,
                exception=_describe(exception),
                data=data,
            )
        )

    def report(self, event: ScenarioEvent) -> ScenarioEvent:
        self.events.append(event)
        extra: Dict[str, Any] = {"event_type": event.type.value}
        extra.update(
            (key, value) for key, value in event.data.items() if key != "findings"
        )
        message = f"[{self.name}] {event.message}"
        if event.exception:
            message = f"{message}: {event.exception}"
        logger.log(_LOG_LEVELS[event.type], message, extra=extra)
        for check, finding in event.data.get("findings", {}).items():
            logger.log(
                _LOG_LEVELS[event.type],
                f"[{self.name}] {check}",
                extra={"event_type": event.type.value, "finding": finding},
            )
        return event


def _describe(exception: Optional[BaseException]) -> Optional[str]:
    if exception is None:
        return None
    return f"{type(exception).__name__}: {exception}"
