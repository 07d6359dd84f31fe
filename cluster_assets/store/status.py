"""Resolution status information for an asset."""

from enum import StrEnum
from dataclasses import dataclass


class Status(StrEnum):
    """Resolution status for an asset within a single pass."""

    PENDING = "Pending"
    GENERATED = "Generated"
    RESTORED = "Restored"
    FAILED = "Failed"

    @property
    def resolved(self) -> bool:
        """Return True if the asset holds a usable value."""
        return self in (Status.GENERATED, Status.RESTORED)


@dataclass
class StatusInfo:
    """Resolution status and optional error message for an asset."""

    status: Status
    error: str | None = None

    def __str__(self) -> str:
        """Return a string representation of the status."""
        if self.error:
            return f"{self.status}: {self.error}"
        return str(self.status)
