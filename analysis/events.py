"""
Event Model for the Banker's Algorithm Simulator.

Defines event types for tracking session actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EventType(Enum):
    """Types of events in a session."""
    CONFIGURE = "configure"
    SAFETY_CHECK = "safety_check"
    ALLOCATION = "allocation"
    DENIAL = "denial"
    RELEASE = "release"
    RELEASE_DENIED = "release_denied"


@dataclass
class SessionEvent:
    """
    Represents a single event in a session.

    Attributes:
        seq: Position of the event in the session (0-based)
        event_type: Type of event
        process_id: Process involved (-1 for system-wide events)
        vector: Resource vector involved (if applicable)
        message: Human-readable description
        reason: Reason for the decision (if applicable)
    """
    seq: int
    event_type: EventType
    process_id: int
    vector: Optional[Tuple[int, ...]] = None
    message: str = ""
    reason: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"#{self.seq}: P{self.process_id}"
        vector = list(self.vector) if self.vector is not None else []

        if self.event_type == EventType.ALLOCATION:
            return f"{base} requests {vector} - GRANTED ({self.reason})"
        elif self.event_type == EventType.DENIAL:
            return f"{base} requests {vector} - DENIED ({self.reason})"
        elif self.event_type == EventType.RELEASE:
            return f"{base} releases {vector}"
        elif self.event_type == EventType.RELEASE_DENIED:
            return f"{base} releases {vector} - DENIED ({self.reason})"
        elif self.event_type == EventType.SAFETY_CHECK:
            return f"#{self.seq}: SAFETY CHECK ({self.message})"
        else:
            return f"{base} - {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of session events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event_type: EventType, process_id: int = -1, **details) -> SessionEvent:
        """Append an event, numbering it after the events already logged."""
        event = SessionEvent(seq=len(self.events), event_type=event_type,
                             process_id=process_id, **details)
        self.events.append(event)
        return event

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]
