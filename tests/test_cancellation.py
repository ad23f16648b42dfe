"""Tests for the cancellation token."""

from vecstore.cancellation import CancellationToken


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_new_token_is_active(self) -> None:
        """Test that a fresh token isn't cancelled and has no cause."""
        token = CancellationToken()

        assert token.cancelled is False
        assert token.cause is None

    def test_cancel_records_cause(self) -> None:
        """Test that cancel() sets the flag and remembers the cause."""
        token = CancellationToken()
        cause = RuntimeError("boom")

        assert token.cancel(cause) is True
        assert token.cancelled is True
        assert token.cause is cause

    def test_first_cause_wins(self) -> None:
        """Test that later cancel() calls don't overwrite the cause."""
        token = CancellationToken()
        first = RuntimeError("first")

        token.cancel(first)
        assert token.cancel(RuntimeError("second")) is False
        assert token.cause is first

    def test_child_follows_parent(self) -> None:
        """Test that a child token observes its parent's cancellation."""
        parent = CancellationToken()
        child = parent.child()

        assert child.cancelled is False

        cause = TimeoutError("deadline")
        parent.cancel(cause)

        assert child.cancelled is True
        assert child.cause is cause

    def test_child_does_not_cancel_parent(self) -> None:
        """Test that cancelling a child leaves the parent active."""
        parent = CancellationToken()
        child = parent.child()

        child.cancel(RuntimeError("child only"))

        assert child.cancelled is True
        assert parent.cancelled is False

    def test_wait_returns_after_cancel(self) -> None:
        """Test wait() with a timeout on an active and a cancelled token."""
        token = CancellationToken()

        assert token.wait(timeout=0.01) is False
        token.cancel()
        assert token.wait(timeout=0.01) is True
