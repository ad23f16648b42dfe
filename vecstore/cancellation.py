"""Cooperative cancellation shared between worker threads.

A :class:`CancellationToken` is a one-shot flag that remembers why it was
triggered. Workers poll it at well-defined points; nothing is interrupted
preemptively. Tokens can be linked: a child created with :meth:`child` reports
itself cancelled as soon as its parent is, which is how a caller's token and a
batch-internal "first error" trigger are combined.
"""

import threading


class CancellationToken:
    """One-shot, cause-carrying cancellation flag.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel(TimeoutError("deadline exceeded"))
        True
        >>> token.cancelled
        True
        >>> token.cancel(RuntimeError("late"))  # first cause wins
        False
    """

    def __init__(self, parent: "CancellationToken | None" = None) -> None:
        self._parent = parent
        self._event = threading.Event()
        self._cause: BaseException | None = None
        self._lock = threading.Lock()

    def cancel(self, cause: BaseException | None = None) -> bool:
        """Trigger cancellation.

        Args:
            cause: Why the operation is being cancelled

        Returns:
            True if this call cancelled the token, False if it already was
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._cause = cause
            self._event.set()
            return True

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def cause(self) -> BaseException | None:
        """The cause recorded by whichever token in the chain was cancelled first."""
        if self._event.is_set():
            return self._cause
        if self._parent is not None:
            return self._parent.cause
        return None

    def child(self) -> "CancellationToken":
        """Create a token that is cancelled whenever this one is."""
        return CancellationToken(parent=self)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until this token (not its parent) is cancelled or timeout elapses."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = f"cancelled cause={self.cause!r}" if self.cancelled else "active"
        return f"<CancellationToken {state}>"
