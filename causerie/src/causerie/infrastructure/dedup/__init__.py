"""Message deduplication."""

from causerie.infrastructure.dedup.seen_token_set import SeenTokenSet

__all__ = ["SeenTokenSet"]
