"""Events emitted by the pool for external delivery.

The engine never delivers anything itself. Subscribers (e.g. the email
notifier) register per event type on an EventBus and are called
synchronously, in subscription order, when an event is published. Handler
errors never reach the publisher, since the change that raised the event is
already committed.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from models.participant import Participant
from models.team import Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantRegistered:
    participant: Participant
    bundle: list[Team]


@dataclass(frozen=True)
class ScoresRecomputed:
    period: int


@dataclass(frozen=True)
class AllocationDegraded:
    participant_id: int


class EventBus:
    """In-process publish/subscribe keyed by event type."""

    def __init__(self):
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable):
        self._handlers[event_type].append(handler)

    def publish(self, event):
        """Call every handler for the event. A failing handler is logged and skipped."""
        for handler in self._handlers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, type(event).__name__)
