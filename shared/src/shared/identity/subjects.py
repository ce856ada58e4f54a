"""
Subject naming convention shared by the issuer and the chat client.

The permission lists baked into identity tokens are written in terms
of these subjects, so both sides must derive them identically.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

DEFAULT_PREFIX = "chat.OSCON2019"
REQUEST_SUBJECT = "chat.req.access"
USAGE_SUBJECT = "ngs.usage"
INBOX_WILDCARD = "_INBOX.>"


def is_valid_token(token: str) -> bool:
    """Check that a string can be used as a single subject token."""
    if not token:
        return False
    return not any(ch in token for ch in (".", "*", ">")) and not any(
        ch.isspace() for ch in token
    )


def subject_matches(pattern: str, subject: str) -> bool:
    """
    Match a subject against a pattern with ``*`` and ``>`` wildcards.

    ``*`` matches exactly one token, ``>`` matches one or more trailing
    tokens.

    Example:
        >>> subject_matches("chat.posts.*", "chat.posts.NATS")
        True
        >>> subject_matches("_INBOX.>", "_INBOX")
        False
    """
    pattern_tokens = pattern.split(".")
    subject_tokens = subject.split(".")

    for i, token in enumerate(pattern_tokens):
        if token == ">":
            return len(subject_tokens) > i
        if i >= len(subject_tokens):
            return False
        if token != "*" and token != subject_tokens[i]:
            return False

    return len(pattern_tokens) == len(subject_tokens)


@dataclass(frozen=True)
class SubjectScheme:
    """
    Subjects used by the chat network.

    Attributes:
        prefix: Common prefix of presence, post and DM subjects
        request_subject: Credential request subject
        usage_subject: Usage report subject
        inbox_wildcard: Reply inbox wildcard
    """

    prefix: str = DEFAULT_PREFIX
    request_subject: str = REQUEST_SUBJECT
    usage_subject: str = USAGE_SUBJECT
    inbox_wildcard: str = INBOX_WILDCARD

    POSTS: ClassVar[str] = "posts"
    DMS: ClassVar[str] = "dms"
    ONLINE: ClassVar[str] = "online"

    def __post_init__(self):
        """Validate prefix on creation."""
        if not self.prefix or any(
            not is_valid_token(t) for t in self.prefix.split(".")
        ):
            raise ValueError(f"Invalid subject prefix: {self.prefix!r}")

    @property
    def presence(self) -> str:
        """Subject carrying heartbeat claims."""
        return f"{self.prefix}.{self.ONLINE}"

    @property
    def posts_wildcard(self) -> str:
        """Wildcard covering every channel post subject."""
        return f"{self.prefix}.{self.POSTS}.*"

    def post_subject(self, channel: str) -> str:
        """
        Subject for posts to a channel.

        Raises:
            ValueError: If the channel name is not a valid subject token
        """
        if not is_valid_token(channel):
            raise ValueError(f"Invalid channel name: {channel!r}")
        return f"{self.prefix}.{self.POSTS}.{channel}"

    def dm_subject(self, public_key: str) -> str:
        """
        Personal inbox subject of an identity.

        Raises:
            ValueError: If the key is not a valid subject token
        """
        if not is_valid_token(public_key):
            raise ValueError(f"Invalid public key for subject: {public_key!r}")
        return f"{self.prefix}.{self.DMS}.{public_key}"

    def channel_of(self, subject: str) -> Optional[str]:
        """Extract the channel from a post subject, if it is one."""
        head = f"{self.prefix}.{self.POSTS}."
        if not subject.startswith(head):
            return None
        channel = subject[len(head):]
        return channel if is_valid_token(channel) else None

    def recipient_of(self, subject: str) -> Optional[str]:
        """Extract the recipient public key from a DM subject, if it is one."""
        head = f"{self.prefix}.{self.DMS}."
        if not subject.startswith(head):
            return None
        key = subject[len(head):]
        return key if is_valid_token(key) else None
