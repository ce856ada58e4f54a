"""
Emoji registry used as a prefix for log lines.

    >>> Emoji.NETWORK.CONNECTED
    '🔗'
    >>> Emoji.format("security", "issued", "Issued credentials for sam")
    '🎫 Issued credentials for sam'
"""

from typing import Dict, Type

from shared.reporter.emojis.base_emojis import ComponentEmoji
from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.messaging_emojis import MessageEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.security_emojis import SecurityEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji


class Emoji:
    """One attribute per category; each category is a ComponentEmoji."""

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    MESSAGE = MessageEmoji
    ERROR = ErrorEmoji
    SECURITY = SecurityEmoji

    @classmethod
    def get_all_categories(cls) -> Dict[str, Type[ComponentEmoji]]:
        return {
            name: attr
            for name, attr in vars(cls).items()
            if isinstance(attr, type) and issubclass(attr, ComponentEmoji)
        }

    @classmethod
    def format(cls, category: str, name: str, message: str) -> str:
        """Prefix ``message`` with the named emoji; unknown names leave it bare."""
        members = cls.get_all_categories().get(category.upper())
        emoji = members.get_all().get(name.upper()) if members else None
        return f"{emoji} {message}" if emoji else message
