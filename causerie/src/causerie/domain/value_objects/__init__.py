"""Domain value objects."""

from causerie.domain.value_objects.message_entry import MessageEntry
from causerie.domain.value_objects.selection import Selection, ViewKind

__all__ = ["MessageEntry", "Selection", "ViewKind"]
