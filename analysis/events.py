"""
Event Model for the OS Resource Allocation Simulator.

Append-only log of simulation actions, keyed by entity type. Stands in for
the persistence layer: the driver records every committed engine call here
and can export the log as JSON.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class EntityType(Enum):
    """Entity collections an event refers to."""
    PROCESS = "processes"
    MEMORY = "memory_blocks"
    DISK = "disk_requests"
    SYSTEM = "system_logs"


class EventType(Enum):
    """Types of events in the simulation."""
    SCHEDULED = "scheduled"
    ALLOCATION = "allocation"
    ALLOCATION_FAILED = "allocation_failed"
    DEALLOCATION = "deallocation"
    COMPACTION = "compaction"
    DISK_PROCESSED = "disk_processed"
    ERROR = "error"


@dataclass
class SimulationEvent:
    """
    Represents a single event in the simulation.

    Attributes:
        entity: Entity collection the event belongs to
        event_type: Type of event
        message: Human-readable description
        data: Entity snapshot or result values (plain JSON-serializable data)
        timestamp: When the event was recorded
    """
    entity: EntityType
    event_type: EventType
    message: str = ""
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        """Format event for logging."""
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.entity.value}/{self.event_type.value}: {self.message}"

    def to_dict(self) -> dict:
        return {
            'event_type': self.event_type.value,
            'message': self.message,
            'data': self.data or {},
            'timestamp': self.timestamp.isoformat()
        }


@dataclass
class EventLog:
    """Collection of simulation events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def record(
        self,
        entity: EntityType,
        event_type: EventType,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ) -> SimulationEvent:
        """Create and add an event in one call."""
        event = SimulationEvent(entity=entity, event_type=event_type, message=message, data=data)
        self.add(event)
        return event

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_entity(self, entity: EntityType) -> list:
        """Get all events for one entity collection."""
        return [e for e in self.events if e.entity == entity]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)

    def to_dict(self) -> Dict[str, list]:
        """Group events by entity collection, in insertion order."""
        return {
            entity.value: [e.to_dict() for e in self.get_events_by_entity(entity)]
            for entity in EntityType
        }

    def export(self, file_path: str) -> None:
        """
        Write the log to a JSON file keyed by entity collection.

        Args:
            file_path: Destination path
        """
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
