from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import List, Union

from .grouping import GroupedOffers, non_empty, stream_type_label
from .types import AvailabilityOffer

CONTAINER_ID = "streamguide-container"
CLOSE_BUTTON_ID = "streamguide-close"
MINIMIZED_CLASS = "minimized"

ERROR_MESSAGE = "Unable to load streaming information"
EMPTY_MESSAGE = "No streaming information available"
POWERED_BY = (
    '<div class="streamguide-powered">Powered by '
    '<a href="https://rapidapi.com/jsimms1970/api/streamguide" target="_blank">StreamGuide API</a></div>'
)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Rendered:
    title: str
    groups: GroupedOffers = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not non_empty(self.groups)


@dataclass(frozen=True)
class Failed:
    message: str = ERROR_MESSAGE


WidgetView = Union[Idle, Loading, Rendered, Failed]


def _header(subtitle: str | None) -> str:
    sub = f'<div class="streamguide-subtitle">{escape(subtitle)}</div>' if subtitle else ""
    return (
        '<div class="streamguide-header"><div class="streamguide-logo">S</div>'
        f'<div><div class="streamguide-title">Where to Watch</div>{sub}</div></div>'
    )


def render_offer(offer: AvailabilityOffer, stream_type: str) -> str:
    label = stream_type_label(stream_type)
    logo = f'<img src="{escape(offer.service_logo)}" class="streamguide-service-logo" alt="">' if offer.service_logo else ""
    return (
        f'<a href="{escape(offer.link or "#")}" target="_blank" rel="noopener noreferrer" '
        f'class="streamguide-service" data-type="{escape(stream_type)}" '
        f'title="{escape(offer.service_name)} ({escape(label)})">'
        f'{logo}<span class="streamguide-service-name">{escape(offer.service_name)}</span></a>'
    )


def render_sections(groups: GroupedOffers) -> str:
    sections: List[str] = []
    for stream_type, offers in non_empty(groups):
        services = "".join(render_offer(o, stream_type) for o in offers)
        sections.append(
            '<div class="streamguide-section">'
            f'<div class="streamguide-section-title">{escape(stream_type_label(stream_type))}</div>'
            f'<div class="streamguide-services">{services}</div></div>'
        )
    return "".join(sections) or f'<div class="streamguide-empty">{EMPTY_MESSAGE}</div>'


def render(view: WidgetView) -> str:
    """Markup for the widget's inner content; the container element is not included."""
    if isinstance(view, Loading):
        return (
            f'<div class="streamguide-widget">{_header("Loading...")}'
            '<div class="streamguide-loading"><div class="streamguide-spinner"></div>'
            "<span>Finding streaming options...</span></div></div>"
        )
    if isinstance(view, Rendered):
        return (
            '<div class="streamguide-widget">'
            f'<button class="streamguide-close" id="{CLOSE_BUTTON_ID}" title="Close">×</button>'
            f"{_header(view.title)}{render_sections(view.groups)}{POWERED_BY}</div>"
        )
    if isinstance(view, Failed):
        return (
            f'<div class="streamguide-widget">{_header(None)}'
            f'<div class="streamguide-error">{escape(view.message)}</div>{POWERED_BY}</div>'
        )
    return ""
