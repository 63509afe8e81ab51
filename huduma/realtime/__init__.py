"""
Realtime push: connection registry, dispatcher and event types.
"""

from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.events import (
    AnyPushEvent,
    JobUpdatedEvent,
    NewJobRequestEvent,
    NewMessageEvent,
    PushEvent,
    parse_push_event,
)
from huduma.realtime.registry import ConnectionRegistry, PushChannel, registry

__all__ = [
    "AnyPushEvent",
    "ConnectionRegistry",
    "Dispatcher",
    "JobUpdatedEvent",
    "NewJobRequestEvent",
    "NewMessageEvent",
    "PushChannel",
    "PushEvent",
    "parse_push_event",
    "registry",
]
