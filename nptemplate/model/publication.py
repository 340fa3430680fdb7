# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(slots=True)
class PublicationData:
    """Who publishes a new nanopublication, when and under which terms."""

    orcid: str
    name: str
    email: str | None = None
    license: str | None = None
    """Falls back to the configured default license."""
    base_uri: str | None = None
    """Falls back to the configured base URI."""
    timestamp: datetime | None = None
    """Falls back to the current time."""
    is_example: bool = False

    def created(self) -> str:
        """The creation time as an ISO 8601 UTC string with milliseconds,
        e.g. `2025-01-01T00:00:00.000Z`."""
        timestamp = self.timestamp or datetime.now(timezone.utc)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        timestamp = timestamp.astimezone(timezone.utc)
        return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
