"""
Severity markers for failures and rejected input.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class ErrorEmoji(ComponentEmoji):
    """Failures, by how badly they hurt the service."""

    CRITICAL = "🔴"  # Service stops
    ERROR = "❌"  # Request or handler failed
    WARNING = "⚠️"  # Degraded, carrying on
    INVALID_INPUT = "❓"  # Unusable request payload
