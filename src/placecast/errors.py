"""Error taxonomy shared by the request path and the delivery workers."""

from __future__ import annotations


class PlacecastError(Exception):
    """Base class for all domain errors."""


class InvalidInput(PlacecastError, ValueError):
    """Raised when request data (coordinates) is rejected before any external call."""


class UpstreamDegraded(PlacecastError):
    """An external lookup failed; callers substitute a fallback value."""

    def __init__(self, service: str, reason: str) -> None:
        super().__init__(f"{service} unavailable: {reason}")
        self.service = service
        self.reason = reason


class UpstreamUnavailable(PlacecastError):
    """A collaborator the pipeline cannot do without (directory, storage) is unreachable."""


class UserNotFound(PlacecastError, LookupError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User '{user_id}' not found")
        self.user_id = user_id


class NotificationNotFound(PlacecastError, LookupError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification '{notification_id}' not found")
        self.notification_id = notification_id


class DeliveryFailure(PlacecastError):
    """Provider rejected or errored during send. Retried by the queue."""


class FatalPrecondition(PlacecastError):
    """Delivery can never succeed for this job (e.g. no phone on file). Not retried."""
