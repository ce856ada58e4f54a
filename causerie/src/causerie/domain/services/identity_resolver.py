"""
Identity resolver - binds public keys to collision-free display names.

Display names are chosen by their owners and are not unique. Each
client keeps its own bindings: the first key to claim a name gets it,
later keys get ``name(2)``, ``name(3)``, ... Peers may therefore see
the same person under different names.
"""

from typing import Dict, Optional

from causerie.domain.exceptions import NameSpaceExhaustedError

MAX_COLLISION_ATTEMPTS = 10000


class IdentityResolver:
    """
    Local name registry, one binding per key and per name.

    Not thread-safe; SessionState serialises access.
    """

    def __init__(self, max_attempts: int = MAX_COLLISION_ATTEMPTS):
        """
        Initialize IdentityResolver.

        Args:
            max_attempts: Suffixed candidates to try before giving up
        """
        self.max_attempts = max_attempts
        self._name_by_key: Dict[str, str] = {}
        self._key_by_name: Dict[str, str] = {}

    def resolve(self, public_key: str, proposed: str) -> str:
        """
        Bind a key to a display name, or return its existing binding.

        Args:
            public_key: Peer public key
            proposed: Name announced by the peer

        Returns:
            Display name bound to the key

        Raises:
            NameSpaceExhaustedError: If every candidate is taken
        """
        bound = self._name_by_key.get(public_key)
        if bound is not None:
            return bound

        if proposed not in self._key_by_name:
            return self._bind(public_key, proposed)

        for i in range(2, self.max_attempts + 2):
            candidate = f"{proposed}({i})"
            if candidate not in self._key_by_name:
                return self._bind(public_key, candidate)

        raise NameSpaceExhaustedError(proposed, self.max_attempts)

    def _bind(self, public_key: str, name: str) -> str:
        self._name_by_key[public_key] = name
        self._key_by_name[name] = public_key
        return name

    def lookup_display_name(self, public_key: str, claim_name: str) -> str:
        """
        Name to show for a claim sender.

        Falls back to the name carried by the claim when the key has no
        local binding.
        """
        return self._name_by_key.get(public_key, claim_name)

    def public_key_for(self, display_name: str) -> Optional[str]:
        return self._key_by_name.get(display_name)

    def release(self, public_key: str) -> Optional[str]:
        """
        Free a key's binding so the name can be reused.

        Returns:
            The released name, or None if the key was not bound
        """
        name = self._name_by_key.pop(public_key, None)
        if name is not None:
            self._key_by_name.pop(name, None)
        return name

    def __contains__(self, public_key: str) -> bool:
        return public_key in self._name_by_key

    def __len__(self) -> int:
        return len(self._name_by_key)
