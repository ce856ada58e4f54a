"""
Permission scoping for issued identities.
"""

from dataclasses import dataclass
from typing import Tuple

from shared.identity import (
    Permissions,
    SubjectPermission,
    SubjectScheme,
    subject_matches,
)


@dataclass(frozen=True)
class ScopedPermissions:
    """
    Publish and subscribe allow-lists for one identity.

    Attributes:
        publish: Subjects the identity may publish on
        subscribe: Subjects the identity may subscribe to
    """

    publish: Tuple[str, ...]
    subscribe: Tuple[str, ...]

    def can_publish(self, subject: str) -> bool:
        return any(subject_matches(p, subject) for p in self.publish)

    def can_subscribe(self, subject: str) -> bool:
        """
        Check a concrete subject or a wildcard against the allow-list.

        A wildcard is only allowed when it appears verbatim in the list.
        """
        if "*" in subject or ">" in subject:
            return subject in self.subscribe
        return any(subject_matches(p, subject) for p in self.subscribe)

    def to_permissions(self) -> Permissions:
        """Convert to the claim representation."""
        return Permissions(
            pub=SubjectPermission(allow=list(self.publish)),
            sub=SubjectPermission(allow=list(self.subscribe)),
        )


class PermissionScoper:
    """
    Derives the capabilities of a new identity from its public key.

    Every identity may talk on presence and channel posts, but the only
    direct-message inbox it may touch is its own.
    """

    def __init__(self, scheme: SubjectScheme):
        """
        Initialize PermissionScoper.

        Args:
            scheme: Subject naming convention
        """
        self.scheme = scheme

    def scope(self, public_key: str) -> ScopedPermissions:
        """
        Build the allow-lists for an identity.

        Args:
            public_key: Public key of the identity

        Returns:
            ScopedPermissions
        """
        own_inbox = self.scheme.dm_subject(public_key)

        return ScopedPermissions(
            publish=(
                self.scheme.presence,
                self.scheme.posts_wildcard,
                own_inbox,
                self.scheme.usage_subject,
            ),
            subscribe=(
                self.scheme.presence,
                self.scheme.posts_wildcard,
                own_inbox,
                self.scheme.inbox_wildcard,
            ),
        )
