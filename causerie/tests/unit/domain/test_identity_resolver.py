"""
Unit tests for IdentityResolver.
"""

import pytest

from causerie.domain.exceptions import NameSpaceExhaustedError
from causerie.domain.services import MAX_COLLISION_ATTEMPTS, IdentityResolver


class TestIdentityResolver:
    """Unit tests for IdentityResolver."""

    # ================================================================
    # Resolve tests
    # ================================================================

    def test_first_key_gets_proposed_name(self):
        """Test an unclaimed name is bound as-is."""
        resolver = IdentityResolver()

        assert resolver.resolve("UA", "sam") == "sam"
        assert resolver.public_key_for("sam") == "UA"

    def test_collisions_get_numbered_suffixes(self):
        """Test later keys with the same name get sam(2), sam(3)."""
        resolver = IdentityResolver()

        names = [resolver.resolve(key, "sam") for key in ("UA", "UB", "UC")]

        assert names == ["sam", "sam(2)", "sam(3)"]

    def test_bound_key_keeps_its_name(self):
        """Test a key resolves to its first binding even with a new name."""
        resolver = IdentityResolver()
        resolver.resolve("UA", "sam")

        assert resolver.resolve("UA", "samuel") == "sam"
        assert resolver.public_key_for("samuel") is None

    def test_freed_suffix_is_reused(self):
        """Test the first free candidate is chosen, not the next number."""
        resolver = IdentityResolver()
        for key in ("UA", "UB", "UC"):
            resolver.resolve(key, "sam")
        resolver.release("UB")

        assert resolver.resolve("UD", "sam") == "sam(2)"

    def test_exhaustion_raises(self):
        """Test running out of candidates raises NameSpaceExhaustedError."""
        resolver = IdentityResolver(max_attempts=3)
        for key in ("UA", "UB", "UC", "UD"):
            resolver.resolve(key, "sam")

        with pytest.raises(NameSpaceExhaustedError) as exc_info:
            resolver.resolve("UE", "sam")

        assert exc_info.value.name == "sam"
        assert exc_info.value.attempts == 3

    def test_default_attempts(self):
        """Test the default number of candidates."""
        assert IdentityResolver().max_attempts == MAX_COLLISION_ATTEMPTS == 10000

    # ================================================================
    # Lookup and release tests
    # ================================================================

    def test_lookup_uses_local_binding(self):
        """Test a bound key renders with its local name."""
        resolver = IdentityResolver()
        resolver.resolve("UA", "sam")
        resolver.resolve("UB", "sam")

        assert resolver.lookup_display_name("UB", "sam") == "sam(2)"

    def test_lookup_falls_back_to_claim_name(self):
        """Test an unbound key renders with the name in its claim."""
        assert IdentityResolver().lookup_display_name("UZ", "zoe") == "zoe"

    def test_release_frees_name(self):
        """Test a released name can be bound by another key."""
        resolver = IdentityResolver()
        resolver.resolve("UA", "sam")

        assert resolver.release("UA") == "sam"
        assert "UA" not in resolver
        assert resolver.resolve("UB", "sam") == "sam"

    def test_release_unknown_key(self):
        """Test releasing an unbound key is a no-op."""
        assert IdentityResolver().release("UZ") is None
