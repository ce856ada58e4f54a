"""
Seen-token set - replay protection for channel posts and DMs.

The bus delivers at least once and a post can reach us through more
than one path, so every accepted claim's token id is remembered.
"""

import threading
from collections import OrderedDict
from typing import Optional


class SeenTokenSet:
    """
    Thread-safe set of token ids with an atomic check-and-set.

    Usage:
        >>> seen = SeenTokenSet()
        >>> seen.is_duplicate("abc")
        False
        >>> seen.is_duplicate("abc")
        True
    """

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize SeenTokenSet.

        Args:
            max_size: Forget the oldest ids beyond this many (None = keep all)
        """
        self.max_size = max_size
        self._lock = threading.Lock()
        self._seen: "OrderedDict[str, None]" = OrderedDict()

    def is_duplicate(self, token_id: str) -> bool:
        """
        Check a token id and record it.

        Returns:
            False the first time an id is seen, True afterwards. Among
            concurrent first calls exactly one returns False.
        """
        with self._lock:
            if token_id in self._seen:
                return True
            self._seen[token_id] = None
            if self.max_size is not None and len(self._seen) > self.max_size:
                self._seen.popitem(last=False)
            return False

    def register(self, token_id: str) -> None:
        """Record an id we produced ourselves."""
        self.is_duplicate(token_id)

    def __contains__(self, token_id: str) -> bool:
        with self._lock:
            return token_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
