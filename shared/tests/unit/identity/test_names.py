"""
Unit tests for display name canonicalization.
"""

import pytest

from shared.identity import InvalidDisplayNameError, canonicalize_display_name


class TestCanonicalizeDisplayName:
    """Unit tests for canonicalize_display_name."""

    # ================================================================
    # Normalization tests
    # ================================================================

    def test_first_token_lowercased_and_truncated(self):
        """Test 'Alexandria Smith' becomes 'alexandr'."""
        assert canonicalize_display_name("Alexandria Smith") == "alexandr"

    def test_full_name_example(self):
        """
        Test only the first token of a full name is kept.

        Deliberately "derek" rather than "derekcol": filling eight letters
        across the space would break the first-token rule, which wins.
        """
        assert canonicalize_display_name("Derek Collison") == "derek"

    def test_short_name_unchanged(self):
        """Test names under the limit are only lowercased."""
        assert canonicalize_display_name("Sam") == "sam"

    def test_bytes_input(self):
        """Test raw request bytes are accepted."""
        assert canonicalize_display_name(b"Bob Smith") == "bob"

    def test_leading_whitespace_ignored(self):
        """Test leading whitespace does not produce an empty name."""
        assert canonicalize_display_name("   Ivan") == "ivan"

    def test_custom_max_length(self):
        """Test the length limit is configurable."""
        assert canonicalize_display_name("Alexandria", max_length=4) == "alex"

    def test_idempotent(self):
        """Test canonicalizing twice changes nothing."""
        once = canonicalize_display_name("Alexandria Smith")
        assert canonicalize_display_name(once) == once

    # ================================================================
    # Rejection tests
    # ================================================================

    @pytest.mark.parametrize("raw", ["", b"", "   ", "\n\t"])
    def test_empty_rejected(self, raw):
        """Test empty or whitespace-only names are rejected."""
        with pytest.raises(InvalidDisplayNameError) as exc_info:
            canonicalize_display_name(raw)

        assert str(exc_info.value) == "Name can not be empty"
