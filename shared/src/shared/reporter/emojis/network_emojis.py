"""
Bus connection markers.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class NetworkEmoji(ComponentEmoji):
    """Connection state and traffic on the message bus."""

    CONNECTING = "⏳"  # Dialing the servers
    CONNECTED = "🔗"
    DISCONNECTED = "⚠️"  # Link lost, client library retrying
    RECONNECTING = "🔄"  # Link back
    DRAIN = "🚰"
    CLOSED = "🔌"  # No more reconnects

    SEND = "📤"
    SUBSCRIPTION = "📬"
