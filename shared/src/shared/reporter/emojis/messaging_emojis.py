"""
Chat traffic and presence markers.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class MessageEmoji(ComponentEmoji):
    """What happened to a post, a DM or a peer."""

    POST = "💬"  # Channel post shown
    DIRECT = "✉️"  # Direct message shown
    UNREAD = "🔔"  # Sender marked unread
    DUPLICATE = "♊"  # Token id seen before
    DROPPED = "🗑️"  # Claim ignored

    JOIN = "👋"  # Peer discovered
    ANNOUNCE = "📣"  # Own heartbeat re-sent for a newcomer
    STALE = "💤"  # Peer heartbeat expired
    EVICT = "🚪"  # Peer forgotten
