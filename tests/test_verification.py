"""
Tests for the slot verification pass.
"""

from openslots.domain.models import OpenSlot, TimeInterval
from openslots.domain.verification import SlotVerifier


def _slot(start, end):
    return OpenSlot.from_interval(TimeInterval(start=start, end=end))


class TestSlotVerifier:
    """Tests for SlotVerifier."""

    def test_keeps_valid_slots_in_order(self):
        """Test that valid candidates pass unchanged."""
        candidates = [_slot(480, 540), _slot(570, 1020)]

        verified = SlotVerifier().verify(candidates, [TimeInterval(start=540, end=570)], 0, 30)

        assert verified == candidates

    def test_keeps_whole_day_slot(self):
        """Test that a slot running to midnight survives the label re-parse."""
        verified = SlotVerifier().verify([_slot(0, 1440)], [], 0, 30)

        assert [str(s) for s in verified] == ["12:00 AM - 12:00 AM"]

    def test_drops_overlapping_slot(self):
        """Test that a candidate overlapping occupied time is dropped."""
        candidates = [_slot(480, 600), _slot(660, 720)]

        verified = SlotVerifier().verify(candidates, [TimeInterval(start=540, end=570)], 0, 30)

        assert [str(s) for s in verified] == ["11:00 AM - 12:00 PM"]

    def test_drops_slot_before_earliest_start(self):
        """Test that a candidate starting in the past is dropped."""
        candidates = [_slot(480, 540), _slot(600, 660)]

        verified = SlotVerifier().verify(candidates, [], 555, 30)

        assert [str(s) for s in verified] == ["10:00 AM - 11:00 AM"]

    def test_drops_short_slot(self):
        """Test that a candidate shorter than the session is dropped."""
        verified = SlotVerifier().verify([_slot(480, 500)], [], 0, 30)

        assert verified == []

    def test_checks_the_label_not_the_interval(self):
        """Test that the formatted label is what gets re-checked."""
        tampered = OpenSlot(interval=TimeInterval(start=480, end=540), label="9:00 AM - 10:00 AM")

        verified = SlotVerifier().verify([tampered], [TimeInterval(start=570, end=600)], 0, 30)

        assert verified == []

    def test_drops_unreadable_label(self):
        """Test that a malformed label is dropped, not raised."""
        broken = OpenSlot(interval=TimeInterval(start=480, end=540), label="whenever")

        assert SlotVerifier().verify([broken], [], 0, 30) == []
