"""Fake resources for registry tests."""

from tests.fakes.fake_resources import FakeAwaitable, FakeHandle, FakeOwner, RecordingCallback

__all__ = ["FakeAwaitable", "FakeHandle", "FakeOwner", "RecordingCallback"]
