"""
Causerie - chat client core.

Keeps each participant's view of presence, channel history and direct
messages, built only from signed claims received on the bus.
"""

__version__ = "0.1.0"
