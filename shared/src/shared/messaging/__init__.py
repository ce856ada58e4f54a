"""
Message bus port and its adapters.
"""

from shared.messaging.bus import (
    BusConnectionError,
    BusError,
    BusMessage,
    BusNotConnectedError,
    BusRequestTimeoutError,
    ClosedCallback,
    MessageBus,
    MessageHandler,
)
from shared.messaging.local_bus import LocalBroker, LocalMessageBus
from shared.messaging.nats_bus import NatsMessageBus

__all__ = [
    "BusConnectionError",
    "BusError",
    "BusMessage",
    "BusNotConnectedError",
    "BusRequestTimeoutError",
    "ClosedCallback",
    "MessageBus",
    "MessageHandler",
    "LocalBroker",
    "LocalMessageBus",
    "NatsMessageBus",
]
