"""Unit tests for CancelSignal."""

import threading
from unittest.mock import Mock

import pytest

from pywaifuvault.cancellation import CancelSignal
from pywaifuvault.exceptions import VaultCancelledError


class TestCancelSignal:
    """Tests for CancelSignal."""

    def test_initial_state(self):
        signal = CancelSignal()
        assert signal.cancelled is False
        signal.raise_if_cancelled()

    def test_cancel_sets_flag(self):
        signal = CancelSignal()
        signal.cancel()
        assert signal.cancelled is True
        with pytest.raises(VaultCancelledError):
            signal.raise_if_cancelled()

    def test_cancel_runs_callbacks_once(self):
        """Test that registered callbacks run once, on the first cancel."""
        signal = CancelSignal()
        callback = Mock()
        signal.add_callback(callback)

        signal.cancel()
        signal.cancel()

        callback.assert_called_once_with()

    def test_callback_added_after_cancel_runs_immediately(self):
        signal = CancelSignal()
        signal.cancel()
        callback = Mock()

        signal.add_callback(callback)

        callback.assert_called_once_with()

    def test_removed_callback_is_not_run(self):
        signal = CancelSignal()
        callback = Mock()
        signal.add_callback(callback)
        signal.remove_callback(callback)

        signal.cancel()

        callback.assert_not_called()

    def test_failing_callback_does_not_stop_others(self):
        """Test that one failing callback does not block the rest."""
        signal = CancelSignal()
        failing = Mock(side_effect=RuntimeError("already closed"))
        other = Mock()
        signal.add_callback(failing)
        signal.add_callback(other)

        signal.cancel()

        other.assert_called_once_with()
        assert signal.cancelled is True

    def test_cancel_from_other_thread(self):
        signal = CancelSignal()
        thread = threading.Thread(target=signal.cancel)
        thread.start()
        thread.join()
        assert signal.cancelled is True
