"""Process-wide service wiring shared by the API and the delivery workers."""

from __future__ import annotations

from functools import lru_cache

from .config import settings
from .db.supabase import get_supabase_client
from .errors import UpstreamUnavailable
from .models.domain import Channel
from .persistence.location_history import SupabaseLocationHistory
from .persistence.notifications import SupabaseNotificationRepository
from .persistence.users import SupabaseUserDirectory
from .services.delivery.dispatcher import DeliveryDispatcher
from .services.delivery.history import JobHistory
from .services.delivery.providers import ResendEmailProvider, TwilioSmsProvider
from .services.delivery.templates import TemplateRenderer
from .services.delivery.worker import ChannelWorker, EmailWorker, SmsWorker
from .services.location.city_resolver import CityResolver
from .services.notifications.pipeline import LocationNotificationPipeline
from .services.places.resolver import PlaceResolver


def _supabase():
    client = get_supabase_client(settings)
    if client is None:
        raise UpstreamUnavailable(
            "Supabase not configured. Set PLACECAST_SUPABASE_URL and PLACECAST_SUPABASE_KEY."
        )
    return client


@lru_cache()
def get_notification_repository() -> SupabaseNotificationRepository:
    return SupabaseNotificationRepository(_supabase())


@lru_cache()
def get_user_directory() -> SupabaseUserDirectory:
    return SupabaseUserDirectory(_supabase())


@lru_cache()
def get_job_history() -> JobHistory:
    return JobHistory.from_settings(settings)


@lru_cache()
def get_dispatcher() -> DeliveryDispatcher:
    # Deferred: the task module imports this one.
    from .worker.tasks import DELIVERY_TASKS

    return DeliveryDispatcher(settings, DELIVERY_TASKS, history=get_job_history())


@lru_cache()
def get_pipeline() -> LocationNotificationPipeline:
    client = _supabase()
    return LocationNotificationPipeline(
        city_resolver=CityResolver(settings),
        place_resolver=PlaceResolver(settings),
        repository=get_notification_repository(),
        dispatcher=get_dispatcher(),
        location_history=SupabaseLocationHistory(client),
    )


@lru_cache()
def get_channel_worker(channel: Channel) -> ChannelWorker:
    renderer = TemplateRenderer(settings)
    repository = get_notification_repository()
    users = get_user_directory()
    match channel:
        case Channel.EMAIL:
            return EmailWorker(repository, users, renderer, ResendEmailProvider(settings))
        case Channel.SMS:
            return SmsWorker(repository, users, renderer, TwilioSmsProvider(settings))
    raise ValueError(f"Unsupported channel: {channel}")
