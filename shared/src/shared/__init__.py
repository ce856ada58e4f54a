"""
Shared building blocks for the chat services.

Holds the pieces both Guichet (credential issuer) and Causerie (chat
client) must agree on: key encoding, subject scheme, claim schemas,
the signed-claim codec, the credentials file format, the message-bus
contract and the SystemReporter logger.
"""

__version__ = "0.1.0"
