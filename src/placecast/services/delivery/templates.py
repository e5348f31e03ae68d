"""Email and SMS rendering.

The template family is chosen by metadata variant: ``RichMetadata`` gets the
full place card, ``BasicMetadata`` the plain message and place name. Travel
estimates that were not routed are always worded as approximations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape

from ...config import Settings
from ...models.domain import Channel, NotificationRecord, User
from ...models.metadata import BasicMetadata, RichMetadata, TravelEstimateModel, parse_metadata

EMAIL_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
    .content { padding: 30px; background: #f9f9f9; border-radius: 0 0 10px 10px; }
    .place-card { background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
    .button { display: inline-block; background: #667eea; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; }
    .footer { text-align: center; margin-top: 30px; color: #666; font-size: 14px; }
  </style>
</head>
<body>
  <div class="header"><h1>{% block title %}Placecast{% endblock %}</h1></div>
  <div class="content">
    <h2>Hello{% if user_name %} {{ user_name }}{% endif %}!</h2>
    <p>{{ message }}</p>
    {% block card %}{% endblock %}
    <p>We hope you enjoy this recommendation!</p>
  </div>
  <div class="footer"><p>You receive this because location notifications are enabled.</p></div>
</body>
</html>
"""

EMAIL_RICH = """{% extends "layout.html" %}
{% block title %}Placecast recommendation{% endblock %}
{% block card %}
    <div class="place-card">
      <h3 style="color: #667eea; margin-top: 0;">{{ place_name }}</h3>
      <p><strong>Address:</strong> {{ details.address }}</p>
      <p><strong>Rating:</strong> {{ "%.1f"|format(details.rating) }} / 5</p>
      <p><strong>Hours:</strong> {{ "Open now" if details.opening_hours.open_now else "Closed now" }}</p>
      {% if details.opening_hours.weekday_text %}
      <ul>
        {% for line in details.opening_hours.weekday_text %}<li>{{ line }}</li>{% endfor %}
      </ul>
      {% endif %}
      <p><strong>From {{ city }}:</strong> {{ travel }}</p>
      {% if details.website %}<p><a href="{{ details.website }}">Website</a></p>{% endif %}
      {% if details.phone %}<p><strong>Phone:</strong> {{ details.phone }}</p>{% endif %}
    </div>
    <div style="text-align: center;"><a href="{{ map_url }}" class="button">View on map</a></div>
{% endblock %}
"""

EMAIL_BASIC = """{% extends "layout.html" %}
{% block card %}
    <div class="place-card">
      <h3 style="color: #667eea; margin-top: 0;">{{ place_name }}</h3>
      <p><strong>Location:</strong> Near your current area</p>
    </div>
{% endblock %}
"""

SMS_RICH = (
    "Hi {{ user_name or 'there' }}! Near {{ city }} we recommend {{ place_name }}"
    " ({{ travel }}). {{ details.address }}"
)

SMS_BASIC = "Placecast\n\n{{ message }}\n\n{{ place_name }}\n\nEnjoy!"

TEMPLATES = {
    "layout.html": EMAIL_LAYOUT,
    "email_rich.html": EMAIL_RICH,
    "email_basic.html": EMAIL_BASIC,
    "sms_rich.txt": SMS_RICH,
    "sms_basic.txt": SMS_BASIC,
}


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    subject: Optional[str]
    body: str
    rich: bool


def travel_phrase(travel: TravelEstimateModel) -> str:
    if travel.is_measured:
        return f"{travel.duration_label}, {travel.distance_label}"
    return f"about {travel.duration_label}, ~{travel.distance_label} (estimated)"


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


class TemplateRenderer:
    def __init__(self, settings: Settings) -> None:
        self.map_base_url = settings.map_base_url
        self.sms_max_length = settings.sms_max_length
        self._env = Environment(
            loader=DictLoader(TEMPLATES),
            autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, record: NotificationRecord, user: User, channel: Channel) -> RenderedMessage:
        metadata = parse_metadata(record.metadata)
        base = {
            "user_name": user.name,
            "message": record.message,
            "place_name": record.recommended_place_name,
        }
        match metadata:
            case RichMetadata():
                context = {
                    **base,
                    "city": metadata.location.city,
                    "details": metadata.place_details,
                    "travel": travel_phrase(metadata.travel_estimate),
                    "map_url": self._map_url(metadata),
                }
                rich = True
            case BasicMetadata():
                context = base
                rich = False
            case _:
                raise TypeError(f"Unsupported metadata type {type(metadata).__name__}")

        family = "rich" if rich else "basic"
        if channel is Channel.EMAIL:
            body = self._env.get_template(f"email_{family}.html").render(**context)
            subject = f"{record.recommended_place_name} - Placecast recommendation"
            return RenderedMessage(subject=subject, body=body, rich=rich)

        body = self._env.get_template(f"sms_{family}.txt").render(**context)
        return RenderedMessage(subject=None, body=truncate(body, self.sms_max_length), rich=rich)

    def _map_url(self, metadata: RichMetadata) -> str:
        coordinates = metadata.place.coordinates if metadata.place else metadata.location.coordinates
        lat, lon = coordinates.latitude, coordinates.longitude
        query = urlencode({"mlat": f"{lat:.6f}", "mlon": f"{lon:.6f}"})
        return f"{self.map_base_url}?{query}#map=17/{lat:.6f}/{lon:.6f}"
