"""
Unit tests for MessageEntry and Selection.
"""

from datetime import datetime

from causerie.domain.value_objects import MessageEntry, Selection, ViewKind

SENT_AT = 1_700_000_000


class TestMessageEntry:
    """Unit tests for MessageEntry."""

    def test_time_label(self):
        """Test the time is rendered as local HH:MM."""
        expected = datetime.fromtimestamp(SENT_AT).strftime("%H:%M")

        assert MessageEntry(SENT_AT, "sam", "hi").time_label == expected

    def test_render_pads_name_column(self):
        """Test the <name> column is padded to nine characters."""
        entry = MessageEntry(SENT_AT, "sam", "hello")

        assert entry.render() == f"{entry.time_label} <sam>     hello"

    def test_render_long_name(self):
        """Test a name filling the column is not truncated."""
        entry = MessageEntry(SENT_AT, "alexandr", "hi")

        assert entry.render() == f"{entry.time_label} <alexandr> hi"


class TestSelection:
    """Unit tests for Selection."""

    def test_channel(self):
        """Test channel selections."""
        selection = Selection.channel("NATS")

        assert selection.kind == ViewKind.CHANNEL
        assert selection.is_channel()
        assert selection.is_channel("NATS")
        assert not selection.is_channel("OSCON")
        assert not selection.is_peer()
        assert str(selection) == "#NATS"

    def test_direct(self):
        """Test peer selections."""
        selection = Selection.direct("zoe", "UZ")

        assert selection.kind == ViewKind.DIRECT
        assert selection.is_peer()
        assert selection.is_peer("UZ")
        assert not selection.is_peer("UA")
        assert not selection.is_channel()
        assert str(selection) == "@zoe"
