"""
Credential markers.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SecurityEmoji(ComponentEmoji):
    """Keys, tokens and credential issuance."""

    KEY = "🔑"  # Key pair created or loaded
    ISSUED = "🎫"
    REJECTED = "⛔"  # Claim failed verification
    EXPIRED = "⌛"
