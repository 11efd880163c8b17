"""
Publish/subscribe event bus.

Components publish domain events (XP awarded, quest completed, plan switched,
...) and presentation code subscribes to render toasts or refresh views. A bus
is created at the composition root and handed to the engine, so independent
engines never share subscribers.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, DefaultDict, Dict, List

from operation.logging.logging_config import get_logger

logger = get_logger(__name__)

# Topics published by the engine
XP_AWARDED = "xp_awarded"
ANSWER_SUBMITTED = "answer_submitted"
FLOW_COMPLETED = "flow_completed"
QUEST_COMPLETED = "quest_completed"
QUEST_SKIPPED = "quest_skipped"
PLAN_CREATED = "plan_created"
PLAN_SWITCHED = "plan_switched"
PLAN_DELETED = "plan_deleted"
STATE_RESET = "state_reset"

# Subscribing to this topic receives every event
ALL_TOPICS = "*"


@dataclass
class Event:
    topic: str
    payload: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous in-process event bus"""

    def __init__(self):
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for a topic.

        Returns:
            A callable that removes the subscription
        """
        self._handlers[topic].append(handler)

        def unsubscribe():
            if handler in self._handlers[topic]:
                self._handlers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: str, **payload) -> Event:
        """
        Deliver an event to the topic's handlers, then to wildcard handlers.

        A failing handler is logged and skipped; it never undoes the state
        change that triggered the event.
        """
        event = Event(topic=topic, payload=payload)
        handlers = list(self._handlers.get(topic, ())) + list(self._handlers.get(ALL_TOPICS, ()))
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler {handler!r} failed for '{topic}': {e}", exc_info=True)
        return event

    def subscriber_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, ()))
