# events package
from .event_bus import Event, EventBus, ALL_TOPICS

__all__ = [
    'Event',
    'EventBus',
    'ALL_TOPICS'
]
