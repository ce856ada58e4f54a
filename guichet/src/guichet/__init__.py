"""
Guichet - credential issuer for the chat network.

Answers credential requests with a freshly generated identity whose
capabilities are scoped to the requester's own inbox.
"""

__version__ = "0.1.0"
