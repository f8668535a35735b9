"""Enumeration types for the NeighborGuard domain."""

from enum import Enum


class Severity(str, Enum):
    """Severity levels for circle events.

    - LOW: Routine activity, no concern
    - MEDIUM: Notable activity, worth reviewing (default for new events)
    - HIGH: Concerning activity, review soon
    - CRITICAL: Immediate attention required
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        """Return string representation of severity."""
        return self.value


class EventStatus(str, Enum):
    """Lifecycle status of an event.

    OPEN and IN_PROGRESS are non-terminal. RESOLVED is terminal: a resolved
    event can no longer be modified.
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

    def __str__(self) -> str:
        return self.value


class MemberRole(str, Enum):
    """Role of a user inside a circle, in decreasing order of privilege."""

    OWNER = "owner"
    RESIDENT = "resident"
    NEIGHBOR = "neighbor"
    OBSERVER = "observer"

    def __str__(self) -> str:
        return self.value


class NotificationType(str, Enum):
    """Kinds of notification produced by circle activity."""

    EVENT_CREATED = "event_created"
    EVENT_RESOLVED = "event_resolved"

    def __str__(self) -> str:
        return self.value


class NoteType(str, Enum):
    """Kinds of discussion note attached to an event."""

    COMMENT = "comment"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values (not member names) in string enum columns."""
    return [member.value for member in enum_cls]
