"""
Process lifecycle emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SystemEmoji(ComponentEmoji):
    """Start, stop and the timers in between."""

    STARTUP = "🚀"  # Process starting
    READY = "✅"  # Serving or chatting
    SHUTDOWN = "🛑"  # Process stopped
    HEARTBEAT = "❤️"  # Presence heartbeat
    TIMER = "⏰"  # Credentials expiry scheduled
