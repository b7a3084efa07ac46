"""Tests for onchange_core.events."""

import threading
from pathlib import Path

import pytest

from onchange_core.events import ChangeEvent, ChannelClosed, EventChannel, EventPath


class TestChangeEvent:
    def test_for_path(self):
        """Test single-path event construction."""
        event = ChangeEvent.for_path("created", "src/a.py", is_dir=False)
        assert event.kind == "created"
        assert event.paths == (EventPath(Path("src/a.py"), False),)

    def test_describe(self):
        """Test the event description used in verbose output."""
        event = ChangeEvent("moved", (EventPath(Path("a")), EventPath(Path("b"))))
        assert event.describe() == "moved: a, b"
        assert ChangeEvent("rescan").describe() == "rescan"


class TestEventChannel:
    def test_fifo_order(self):
        """Test events are received in send order."""
        channel = EventChannel()
        a, b = ChangeEvent("one"), ChangeEvent("two")
        channel.send(a)
        channel.send(b)
        assert channel.recv() is a
        assert channel.recv() is b

    def test_try_recv_empty(self):
        """Test try_recv on an empty channel returns None."""
        assert EventChannel().try_recv() is None

    def test_recv_after_close_raises(self):
        """Test recv drains remaining events, then raises."""
        channel = EventChannel()
        event = ChangeEvent("one")
        channel.send(event)
        channel.close()
        assert channel.recv() is event
        with pytest.raises(ChannelClosed):
            channel.recv()
        # Stays closed
        with pytest.raises(ChannelClosed):
            channel.recv()
        assert channel.try_recv() is None

    def test_send_after_close_raises(self):
        """Test sending on a closed channel raises."""
        channel = EventChannel()
        channel.close()
        channel.close()
        assert channel.closed
        with pytest.raises(ChannelClosed):
            channel.send(ChangeEvent("late"))

    def test_close_wakes_blocked_receiver(self):
        """Test close wakes a receiver blocked in recv."""
        channel = EventChannel()
        errors = []

        def receive():
            try:
                channel.recv()
            except ChannelClosed as e:
                errors.append(e)

        thread = threading.Thread(target=receive)
        thread.start()
        channel.close()
        thread.join(timeout=2.0)
        assert not thread.is_alive()
        assert len(errors) == 1
