"""Shared test fixtures."""

from collections.abc import Callable, Sequence

import numpy as np
import pytest

from rsslog.runtime import FrameMetadata, IQOutputFormat, SensingRuntime


class RecordingRuntime(SensingRuntime):
    """Scripted runtime which records every call.

    Args:
        frames: frames returned by successive `get_next` calls; once they run
            out, `get_next` fails.
        data_length: frame length reported by `get_metadata`; defaults to the
            length of the first frame.
        fail: names of methods which should fail.
        on_poll: called with the poll count after every successful poll.
    """

    def __init__(
        self, frames: Sequence[Sequence] = (), data_length: int | None = None,
        fail: Sequence[str] = (),
        on_poll: Callable[[int], None] | None = None
    ) -> None:
        self.frames = list(frames)
        if data_length is None:
            data_length = len(self.frames[0]) if self.frames else 0
        self.data_length = data_length
        self.fail = set(fail)
        self.on_poll = on_poll
        self.calls: list[tuple] = []
        self.polls = 0

    @property
    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def called(self, name: str) -> list[tuple]:
        return [call[1:] for call in self.calls if call[0] == name]

    def _call(self, name: str, *args) -> bool:
        self.calls.append((name, *args))
        return name not in self.fail

    def initialize(self):
        return self._call("initialize")

    def activate(self, verbose=False):
        return self._call("activate", verbose)

    def deactivate(self):
        self._call("deactivate")

    def create_configuration(self, kind):
        if not self._call("create_configuration", kind):
            return None
        return {"kind": kind}

    def destroy_configuration(self, config):
        self._call("destroy_configuration", config)

    def set_profile(self, config, profile):
        self._call("set_profile", profile)

    def set_window(self, config, start, length):
        self._call("set_window", start, length)

    def set_repetition_rate(self, config, frequency):
        self._call("set_repetition_rate", frequency)

    def set_sensor(self, config, sensor):
        self._call("set_sensor", sensor)

    def set_receiver_gain(self, config, gain):
        self._call("set_receiver_gain", gain)

    def set_bin_count(self, config, n_bins):
        self._call("set_bin_count", n_bins)

    def set_running_average_factor(self, config, factor):
        self._call("set_running_average_factor", factor)

    def set_iq_output_format(self, config, fmt: IQOutputFormat):
        self._call("set_iq_output_format", fmt)

    def create_service(self, config):
        if not self._call("create_service", config):
            return None
        return "handle"

    def get_metadata(self, handle):
        self._call("get_metadata", handle)
        return FrameMetadata(data_length=self.data_length)

    def activate_service(self, handle):
        return self._call("activate_service", handle)

    def deactivate_service(self, handle):
        return self._call("deactivate_service", handle)

    def destroy_service(self, handle):
        self._call("destroy_service", handle)

    def get_next(self, handle, buffer):
        if not self._call("get_next", handle) or not self.frames:
            return False
        buffer[:] = np.asarray(self.frames.pop(0))
        self.polls += 1
        if self.on_poll is not None:
            self.on_poll(self.polls)
        return True


@pytest.fixture
def recording_runtime():
    """Factory for scripted runtimes."""
    return RecordingRuntime
