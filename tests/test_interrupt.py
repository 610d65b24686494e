"""Test the termination signal."""

import signal

import pytest

from rsslog import TerminationSignal


def test_set():
    """The signal starts unset, and stays set."""
    stop = TerminationSignal()
    assert not stop.is_set()
    stop.set()
    stop.set()
    assert stop.is_set()


@pytest.mark.skipif(
    not hasattr(signal, "SIGUSR1"), reason="SIGUSR1 is not available.")
def test_install():
    """Receiving an installed signal sets the flag."""
    stop = TerminationSignal()
    previous = signal.getsignal(signal.SIGUSR1)
    try:
        stop.install(signals=(signal.SIGUSR1,))
        assert not stop.is_set()
        signal.raise_signal(signal.SIGUSR1)
        assert stop.is_set()
    finally:
        signal.signal(signal.SIGUSR1, previous)
