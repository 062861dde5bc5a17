"""Dashboard notification rules."""

from src.notifications.rules import evaluate_notifications, mark_as_read, unread_count

__all__ = ["evaluate_notifications", "mark_as_read", "unread_count"]
