"""
Base class for emoji categories.

Every category is a class of string constants; the registry in
``emoji.py`` aggregates them.
"""

from typing import Dict


class ComponentEmoji:
    """
    Emoji constants for one concern of the chat services.

    Example:
        >>> class PresenceEmoji(ComponentEmoji):
        ...     ONLINE = "🟢"
        >>> PresenceEmoji.get_all()
        {'ONLINE': '🟢'}
    """

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """Map constant names to emoji characters."""
        return {
            name: value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        }
