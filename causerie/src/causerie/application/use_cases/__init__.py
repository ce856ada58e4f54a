"""
Use cases for Causerie application layer.
"""

from causerie.application.use_cases.process_channel_post import (
    ProcessChannelPostUseCase,
)
from causerie.application.use_cases.process_direct_message import (
    ProcessDirectMessageUseCase,
)
from causerie.application.use_cases.process_heartbeat import ProcessHeartbeatUseCase
from causerie.application.use_cases.select_view import SelectViewUseCase
from causerie.application.use_cases.send_post import SendPostUseCase
from causerie.application.use_cases.sweep_presence import SweepPresenceUseCase

__all__ = [
    "ProcessChannelPostUseCase",
    "ProcessDirectMessageUseCase",
    "ProcessHeartbeatUseCase",
    "SelectViewUseCase",
    "SendPostUseCase",
    "SweepPresenceUseCase",
]
