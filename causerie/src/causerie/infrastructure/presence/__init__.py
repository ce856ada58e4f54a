"""Presence announcements."""

from causerie.infrastructure.presence.heartbeat_loop import HeartbeatLoop

__all__ = ["HeartbeatLoop"]
