"""
Dashboard notification model.

Notifications are derived from the month totals every time the dashboard
loads. Nothing here is persisted: the `read` flag lives only as long as the
list that holds it.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Visual category of a notification."""
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """An advisory message shown on the dashboard."""

    id: str = Field(
        ...,
        description="Stable identifier of the rule that produced it"
    )
    type: NotificationType
    title: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    read: bool = False

    def mark_read(self) -> "Notification":
        """Copy of this notification with `read` set."""
        return self.model_copy(update={"read": True})
