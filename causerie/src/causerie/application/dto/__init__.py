"""
Data Transfer Objects for Causerie application layer.
"""

from causerie.application.dto.session_views import (
    Delivery,
    DeliveryStatus,
    DirectoryEntry,
    DirectoryListing,
    SentPost,
    ViewSnapshot,
)

__all__ = [
    "Delivery",
    "DeliveryStatus",
    "DirectoryEntry",
    "DirectoryListing",
    "SentPost",
    "ViewSnapshot",
]
