"""Fake resources exposing the capabilities the registry dispatches on."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from custodian import Signal


class RecordingCallback:
    """Zero-argument release callback that records its calls into a shared log.

    Parameters
    ----------
    name : str
        Value appended to ``log`` on each call
    log : list[str]
        Shared call log
    error : BaseException | None
        Exception raised after recording, if any
    """

    def __init__(self, name: str, log: list[str], error: BaseException | None = None) -> None:
        self.name = name
        self.log = log
        self.error = error
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1
        self.log.append(self.name)
        if self.error is not None:
            raise self.error


class FakeHandle:
    """Composite object released through named methods.

    Parameters
    ----------
    label : str
        Descriptive label
    """

    def __init__(self, label: str = "", **options: Any) -> None:
        self.label = label
        self.options = options
        self.destroy_calls = 0
        self.close_calls = 0

    def destroy(self) -> None:
        self.destroy_calls += 1

    def close(self) -> None:
        self.close_calls += 1


class FakeAwaitable:
    """Promise-like object satisfying the awaitable-with-cancel capability.

    Completion hooks run synchronously when the awaitable settles, whether by
    ``settle()`` or by ``cancel()``.
    """

    def __init__(self) -> None:
        self._done = False
        self._callbacks: list[Callable[[FakeAwaitable], Any]] = []
        self.cancel_calls = 0

    def done(self) -> bool:
        return self._done

    def add_done_callback(self, callback: Callable[[FakeAwaitable], Any]) -> None:
        if self._done:
            callback(self)
        else:
            self._callbacks.append(callback)

    def cancel(self) -> bool:
        self.cancel_calls += 1
        self._finish()
        return True

    def settle(self) -> None:
        self._finish()

    def _finish(self) -> None:
        if self._done:
            return
        self._done = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)


class FakeOwner:
    """Object announcing its own destruction through a ``destroying`` signal."""

    def __init__(self) -> None:
        self.destroying = Signal("destroying")

    def destroy(self) -> None:
        self.destroying.fire()
