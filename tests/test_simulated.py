"""Test the simulated runtime."""

import numpy as np
import pytest

from rsslog import RunRequest, ServiceKind, TerminationSignal, activated
from rsslog import DataLogger, log_data
from rsslog.errors import FrameRetrievalFailed
from rsslog.runtime import SimulatedRuntime
from rsslog.runtime.simulated import SAMPLE_SPACING
from rsslog.services import get_service


def _service(runtime, request):
    service = get_service(request.service_type)
    config = service.build_configuration(runtime, request)
    return service, config, runtime.create_service(config)


def _runtime(**kwargs):
    runtime = SimulatedRuntime(seed=0, realtime=False, **kwargs)
    assert runtime.initialize()
    assert runtime.activate()
    return runtime


@pytest.mark.parametrize("kind,dtype", [
    (ServiceKind.POWER_BINS, np.uint16),
    (ServiceKind.ENVELOPE, np.float64),
    (ServiceKind.IQ, np.complex64),
])
def test_frames(kind, dtype):
    """Frames match the metadata shape."""
    runtime = _runtime()
    request = RunRequest(kind, range_start=0.1, range_end=0.4, n_bins=6)
    service, _, handle = _service(runtime, request)
    assert handle is not None

    metadata = runtime.get_metadata(handle)
    if kind == ServiceKind.POWER_BINS:
        assert metadata.data_length == 6
    else:
        assert metadata.data_length == int(request.length / SAMPLE_SPACING)
    assert metadata.start_m == 0.1

    buffer = service.allocate(metadata)
    assert buffer.dtype == dtype
    assert runtime.activate_service(handle)
    assert runtime.get_next(handle, buffer)
    assert np.all(np.abs(buffer) > 0)
    assert runtime.deactivate_service(handle)
    runtime.destroy_service(handle)


def test_reflector_peak():
    """The envelope peaks at the simulated reflector."""
    runtime = _runtime(target=0.3)
    request = RunRequest(
        ServiceKind.ENVELOPE, range_start=0.2, range_end=0.5, gain=1.0)
    service, _, handle = _service(runtime, request)
    buffer = service.allocate(runtime.get_metadata(handle))

    runtime.activate_service(handle)
    runtime.get_next(handle, buffer)
    peak = 0.2 + np.argmax(buffer) * SAMPLE_SPACING
    assert peak == pytest.approx(0.3, abs=0.01)


@pytest.mark.parametrize("options", [
    {"range_start": 0.5, "range_end": 0.2},
    {"range_start": 0.3, "range_end": 0.3},
    {"service_profile": 6},
])
def test_invalid_configuration(options):
    """Invalid configurations are refused when creating the service."""
    runtime = _runtime()
    _, _, handle = _service(
        runtime, RunRequest(ServiceKind.ENVELOPE, **options))
    assert handle is None


def test_requires_activation():
    runtime = SimulatedRuntime(realtime=False)
    assert not runtime.activate()
    assert runtime.create_configuration(ServiceKind.IQ) is None

    assert runtime.initialize()
    assert runtime.activate()
    assert runtime.create_configuration(ServiceKind.IQ) is not None


def test_poll_requires_active_service():
    runtime = _runtime()
    service, _, handle = _service(runtime, RunRequest(ServiceKind.IQ))
    buffer = service.allocate(runtime.get_metadata(handle))
    assert not runtime.get_next(handle, buffer)

    runtime.activate_service(handle)
    assert not runtime.get_next(handle, buffer[:-1])
    assert runtime.get_next(handle, buffer)


def test_max_frames():
    """A runtime with `max_frames` fails the run after that many frames."""
    runtime = _runtime(max_frames=2)
    service, config, _ = _service(
        runtime, RunRequest(ServiceKind.POWER_BINS))
    logger = DataLogger(
        runtime, service, TerminationSignal(), update_count=5)

    frames = []
    with pytest.raises(FrameRetrievalFailed):
        for frame in logger.stream(config):
            frames.append(frame.copy())
    assert len(frames) == 2


@pytest.mark.parametrize("step", [
    "initialize", "activate", "create_configuration", "activate_service",
    "deactivate_service", "get_next"])
def test_fail(step, tmp_path):
    """Every lifecycle step can be made to fail."""
    runtime = SimulatedRuntime(realtime=False, fail=[step])
    request = RunRequest(
        ServiceKind.POWER_BINS, update_count=1, out=str(tmp_path / "o.tsv"))
    assert not log_data(runtime, request, TerminationSignal())
    assert not runtime.active


def test_activated():
    runtime = SimulatedRuntime(realtime=False)
    with activated(runtime, verbose=True):
        assert runtime.active
    assert not runtime.active
