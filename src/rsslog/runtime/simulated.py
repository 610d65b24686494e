"""Simulated sensing runtime."""

import logging
import time
from collections.abc import Collection
from dataclasses import dataclass, field, replace

import numpy as np
from jaxtyping import Complex, Float64

from ..config import ServiceKind
from .base import FrameMetadata, IQOutputFormat, SensingRuntime

SAMPLE_SPACING = 0.00048
"""Distance between envelope/IQ samples, in m."""

WAVELENGTH = 0.005
"""Carrier wavelength, in m (60 GHz)."""

PROFILES = range(1, 6)
"""Valid service profiles."""

SENSORS = range(1, 5)
"""Valid sensor ids."""


@dataclass
class _Configuration:
    kind: ServiceKind
    profile: int = 2
    start: float = 0.2
    length: float = 0.5
    frequency: float | None = None
    sensor: int = 1
    gain: float = 0.5
    n_bins: int = 8
    running_avg: float = 0.7
    iq_format: IQOutputFormat = IQOutputFormat.INT16_COMPLEX


@dataclass
class _Service:
    config: _Configuration
    metadata: FrameMetadata
    active: bool = False
    destroyed: bool = False
    frames: int = 0
    deadline: float = 0.0
    previous: np.ndarray | None = field(default=None, repr=False)


class SimulatedRuntime(SensingRuntime):
    """Runtime which simulates a single reflector in front of the sensor.

    Frames are generated with numpy, and (by default) paced at the configured
    repetition rate. Configurations are validated when a service is created;
    the runtime refuses non-positive window lengths, unknown profiles and
    unknown sensors.

    Args:
        target: distance to the simulated reflector, in m.
        seed: random seed for the measurement noise.
        realtime: sleep until the next frame is due in `get_next`.
        fail: lifecycle steps which should fail, by method name, e.g.
            `{"activate_service"}`. Used to exercise failure handling.
        max_frames: number of frames each service delivers before
            `get_next` starts failing; `None` for no limit.
        name: human-readable name.
    """

    def __init__(
        self, target: float = 0.3, seed: int | None = None,
        realtime: bool = True, fail: Collection[str] = (),
        max_frames: int | None = None, name: str = "SimulatedRuntime"
    ) -> None:
        self.log = logging.getLogger(name)
        self.target = target
        self.realtime = realtime
        self.fail = set(fail)
        self.max_frames = max_frames
        self.rng = np.random.default_rng(seed)

        self.initialized = False
        self.active = False

    def _refuse(self, step: str) -> bool:
        if step in self.fail:
            self.log.error(f"Simulated failure: {step}")
            return True
        return False

    def initialize(self) -> bool:
        if self._refuse("initialize"):
            return False
        self.initialized = True
        return True

    def activate(self, verbose: bool = False) -> bool:
        if not self.initialized:
            self.log.error("Driver layer is not initialized.")
            return False
        if self._refuse("activate"):
            return False
        if verbose:
            self.log.setLevel(logging.DEBUG)
        self.active = True
        self.log.debug("Runtime activated.")
        return True

    def deactivate(self) -> None:
        self.active = False
        self.log.debug("Runtime deactivated.")

    def create_configuration(
        self, kind: ServiceKind
    ) -> _Configuration | None:
        if not self.active:
            self.log.error("Runtime is not activated.")
            return None
        if self._refuse("create_configuration"):
            return None
        return _Configuration(kind=kind)

    def destroy_configuration(self, config: _Configuration) -> None:
        pass

    def set_profile(self, config: _Configuration, profile: int) -> None:
        config.profile = profile

    def set_window(
        self, config: _Configuration, start: float, length: float
    ) -> None:
        config.start = start
        config.length = length

    def set_repetition_rate(
        self, config: _Configuration, frequency: float
    ) -> None:
        config.frequency = frequency

    def set_sensor(self, config: _Configuration, sensor: int) -> None:
        config.sensor = sensor

    def set_receiver_gain(self, config: _Configuration, gain: float) -> None:
        config.gain = gain

    def set_bin_count(self, config: _Configuration, n_bins: int) -> None:
        config.n_bins = n_bins

    def set_running_average_factor(
        self, config: _Configuration, factor: float
    ) -> None:
        config.running_avg = factor

    def set_iq_output_format(
        self, config: _Configuration, fmt: IQOutputFormat
    ) -> None:
        config.iq_format = fmt

    def _validate(self, config: _Configuration) -> str | None:
        if config.length <= 0:
            return f"Window length must be positive: {config.length}"
        if config.profile not in PROFILES:
            return f"Unknown profile: {config.profile}"
        if config.sensor not in SENSORS:
            return f"Unknown sensor: {config.sensor}"
        if config.frequency is None or config.frequency <= 0:
            return "Streaming repetition rate is not set."
        return None

    def create_service(self, config: _Configuration) -> _Service | None:
        if self._refuse("create_service"):
            return None
        error = self._validate(config)
        if error is not None:
            self.log.error(error)
            return None

        n_samples = max(1, int(config.length / SAMPLE_SPACING))
        if config.kind == ServiceKind.POWER_BINS:
            data_length = config.n_bins
        else:
            data_length = n_samples
        metadata = FrameMetadata(
            data_length=data_length, start_m=config.start,
            length_m=n_samples * SAMPLE_SPACING)
        # Services keep their own copy; later edits to `config` don't apply.
        return _Service(config=replace(config), metadata=metadata)

    def get_metadata(self, handle: _Service) -> FrameMetadata:
        return handle.metadata

    def activate_service(self, handle: _Service) -> bool:
        if handle.destroyed or self._refuse("activate_service"):
            return False
        handle.active = True
        handle.deadline = time.perf_counter()
        self.log.debug(f"Service activated: {handle.config}")
        return True

    def deactivate_service(self, handle: _Service) -> bool:
        if not handle.active or self._refuse("deactivate_service"):
            return False
        handle.active = False
        return True

    def destroy_service(self, handle: _Service) -> None:
        handle.active = False
        handle.destroyed = True

    def _envelope(
        self, config: _Configuration, n: int
    ) -> Float64[np.ndarray, "n"]:
        distance = config.start + np.arange(n) * SAMPLE_SPACING
        width = 0.01 * config.profile
        peak = (1000 + 8000 * config.gain) * np.exp(
            -(distance - self.target)**2 / (2 * width**2))
        noise = np.abs(self.rng.normal(scale=50 * config.gain, size=n))
        return peak + noise + 100

    def _iq(self, config: _Configuration, n: int) -> Complex[np.ndarray, "n"]:
        distance = config.start + np.arange(n) * SAMPLE_SPACING
        phase = 4 * np.pi * distance / WAVELENGTH
        iq = self._envelope(config, n) * np.exp(1j * phase) / 1000
        if config.iq_format == IQOutputFormat.INT16_COMPLEX:
            iq = np.round(iq * 1000)
        return iq

    def _frame(self, service: _Service) -> np.ndarray:
        config = service.config
        n_samples = max(1, int(config.length / SAMPLE_SPACING))

        if config.kind == ServiceKind.IQ:
            return self._iq(config, n_samples)

        envelope = self._envelope(config, n_samples)
        if config.kind == ServiceKind.ENVELOPE:
            if service.previous is not None:
                envelope = (
                    config.running_avg * service.previous
                    + (1 - config.running_avg) * envelope)
            service.previous = envelope
            return envelope

        bins = np.array_split(envelope, config.n_bins)
        return np.array([np.mean(b) if len(b) > 0 else 0.0 for b in bins])

    def get_next(self, handle: _Service, buffer: np.ndarray) -> bool:
        if not handle.active:
            self.log.error("Service is not activated.")
            return False
        if buffer.shape != (handle.metadata.data_length,):
            self.log.error(
                f"Buffer shape {buffer.shape} does not match data length "
                f"{handle.metadata.data_length}.")
            return False
        if self._refuse("get_next"):
            return False
        if self.max_frames is not None and handle.frames >= self.max_frames:
            self.log.error("Sensor stopped responding.")
            return False

        if self.realtime and handle.config.frequency is not None:
            handle.deadline += 1.0 / handle.config.frequency
            delay = handle.deadline - time.perf_counter()
            if delay > 0:
                time.sleep(delay)

        frame = self._frame(handle)
        if np.issubdtype(buffer.dtype, np.integer):
            info = np.iinfo(buffer.dtype)
            frame = np.clip(np.round(frame), info.min, info.max)
        buffer[:] = frame.astype(buffer.dtype)
        handle.frames += 1
        return True
