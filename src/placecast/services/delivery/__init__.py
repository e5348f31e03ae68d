"""Channel delivery: templates, providers, workers and the dispatcher."""

from .dispatcher import DeliveryDispatcher, queue_for
from .worker import ChannelWorker, EmailWorker, SmsWorker

__all__ = [
    "DeliveryDispatcher",
    "queue_for",
    "ChannelWorker",
    "EmailWorker",
    "SmsWorker",
]
