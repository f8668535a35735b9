"""Parsing helpers for client-supplied timestamps."""

from __future__ import annotations

from datetime import UTC, datetime

from neighborguard.core.exceptions import InvalidInputError


def parse_cursor(value: str | datetime | None, *, field: str = "cursor") -> datetime | None:
    """Parse an ISO-8601 pagination cursor into an aware UTC datetime.

    Naive values are taken to be UTC. A trailing ``Z`` is accepted.

    Raises:
        InvalidInputError: If the value does not parse as a timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if not text:
            raise InvalidInputError("Invalid cursor: empty timestamp", field=field, value=value)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInputError(
                f"Invalid cursor: {value}",
                field=field,
                value=value,
                constraint="ISO-8601 timestamp",
            ) from None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
