"""Per-channel delivery: render, send, record the outcome."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ...errors import DeliveryFailure, FatalPrecondition, UserNotFound
from ...models.domain import Channel, NotificationRecord, SendResult, User
from ...persistence.notifications import NotificationRepository
from ...persistence.users import UserDirectory
from ..notifications.status import StatusTracker
from .providers import DeliveryProvider
from .templates import RenderedMessage, TemplateRenderer

logger = logging.getLogger(__name__)


class ChannelWorker(ABC):
    """Runs one delivery attempt for a queued notification.

    Every call starts from the stored record, so a redelivered job renders and
    sends again from scratch. ``DeliveryFailure`` asks the queue for another
    attempt; ``FatalPrecondition`` and ``NotificationNotFound`` do not.
    """

    channel: Channel

    def __init__(
        self,
        repository: NotificationRepository,
        users: UserDirectory,
        renderer: TemplateRenderer,
        provider: DeliveryProvider,
        status_tracker: StatusTracker | None = None,
    ) -> None:
        self.repository = repository
        self.users = users
        self.renderer = renderer
        self.provider = provider
        self.status_tracker = status_tracker or StatusTracker(repository)

    @abstractmethod
    def destination(self, user: User) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def missing_destination_error(self) -> str:
        raise NotImplementedError

    def process(self, notification_id: str, attempt: int = 1) -> SendResult:
        record = self.repository.get(notification_id)
        logger.info(f"Processing {self.channel.value} notification {notification_id} (attempt {attempt})")

        try:
            destination, content = self._prepare(record, attempt)
            result = self.provider.send(destination, content)
        except FatalPrecondition:
            raise
        except Exception as exc:
            logger.exception(f"{self.channel.value} delivery raised for notification {notification_id}")
            result = SendResult(success=False, error=str(exc) or type(exc).__name__)

        if result.success:
            self.status_tracker.mark_sent(notification_id, result.provider_message_id)
            logger.info(f"{self.channel.value} notification {notification_id} delivered")
            return result

        error = result.error or "Unknown delivery error"
        self.status_tracker.mark_failed(notification_id, error, attempt)
        raise DeliveryFailure(error)

    def _prepare(self, record: NotificationRecord, attempt: int) -> tuple[str, RenderedMessage]:
        user = self._recipient(record, attempt)
        destination = self.destination(user)
        if not destination:
            error = self.missing_destination_error()
            self.status_tracker.mark_failed(record.id, error, attempt)
            raise FatalPrecondition(error)
        return destination, self.renderer.render(record, user, self.channel)

    def _recipient(self, record: NotificationRecord, attempt: int) -> User:
        try:
            return self.users.find_by_id(record.recipient_ref)
        except UserNotFound as exc:
            self.status_tracker.mark_failed(record.id, str(exc), attempt)
            raise FatalPrecondition(str(exc)) from exc


class EmailWorker(ChannelWorker):
    channel = Channel.EMAIL

    def destination(self, user: User) -> Optional[str]:
        return user.email

    def missing_destination_error(self) -> str:
        return "User email not found"


class SmsWorker(ChannelWorker):
    channel = Channel.SMS

    def destination(self, user: User) -> Optional[str]:
        return user.phone

    def missing_destination_error(self) -> str:
        return "User phone number not found"
