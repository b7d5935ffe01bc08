"""
Base Domain Classes

Building blocks shared by every bounded context:
- ValueObject: immutable objects compared by value
- DomainEvent: something that happened, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Events are raised by services and handed to the unit of work,
    which publishes them on the message bus once the transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(default_factory=datetime.now, init=False)

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for logging and task payloads"""
        payload = {
            key: value
            for key, value in self.__dict__.items()
            if key not in ('event_id', 'occurred_at')
        }
        return {
            'event_id': str(self.event_id),
            'event_type': self.name,
            'occurred_at': self.occurred_at.isoformat(),
            'payload': payload,
        }

