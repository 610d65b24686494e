"""Measurement service variants.

Each [`ServiceKind`][rsslog.config.] has a [`Service`][.] implementation
which knows how to build its runtime configuration, what frame buffer it
needs, and how to render a frame as a line of text:

| Kind         | Buffer      | Line                                          |
| ------------ | ----------- | --------------------------------------------- |
| `POWER_BINS` | `uint16`    | `{bin}\\t` per bin                            |
| `ENVELOPE`   | `float64`   | `{round(amplitude)}\\t` per sample            |
| `IQ`         | `complex64` | `{real:.6f}\\t{imag:.6f}\\t` per sample       |

Lines are newline-terminated, with no header.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
from jaxtyping import Complex64, Float64, UInt16

from .config import RunRequest, ServiceKind
from .errors import ConfigCreationFailed
from .runtime import FrameMetadata, IQOutputFormat, SensingRuntime


class Service(ABC):
    """Service variant base class.

    Args:
        name: human-readable name, also used for logging.
    """

    kind: ServiceKind
    dtype: type

    def __init__(self, name: str) -> None:
        self.name = name
        self.log = logging.getLogger(name)

    def build_configuration(
        self, runtime: SensingRuntime, request: RunRequest
    ) -> object:
        """Create a runtime configuration for this service.

        Unset options (`service_profile=0`, `gain=None`) are not passed to
        the runtime, which keeps its own service defaults.

        Args:
            runtime: runtime to create the configuration with.
            request: requested options.

        Returns:
            Opaque configuration; the caller must destroy it with
            [`destroy_configuration`][rsslog.runtime.SensingRuntime.].

        Raises:
            ConfigCreationFailed: the runtime could not create a
                configuration.
        """
        config = runtime.create_configuration(self.kind)
        if config is None:
            raise ConfigCreationFailed(
                f"Could not create {self.name} configuration.")

        # Profiles start at 1; 0 means use the service default.
        if request.service_profile > 0:
            runtime.set_profile(config, request.service_profile)

        runtime.set_window(config, request.range_start, request.length)
        runtime.set_repetition_rate(config, request.frequency)
        runtime.set_sensor(config, request.sensor)

        if request.gain is not None:
            runtime.set_receiver_gain(config, request.gain)

        self.configure(runtime, config, request)
        return config

    @abstractmethod
    def configure(
        self, runtime: SensingRuntime, config: object, request: RunRequest
    ) -> None:
        """Apply service-specific options."""
        ...

    def allocate(self, metadata: FrameMetadata) -> np.ndarray:
        """Allocate a (reusable) frame buffer."""
        return np.zeros(metadata.data_length, dtype=self.dtype)

    @abstractmethod
    def format_frame(self, frame: np.ndarray) -> str:
        """Render a frame as a single tab-separated line."""
        ...


class PowerBins(Service):
    """Power bins: a small number of integer energy bins."""

    kind = ServiceKind.POWER_BINS
    dtype = np.uint16

    def __init__(self, name: str = "PowerBins") -> None:
        super().__init__(name=name)

    def configure(
        self, runtime: SensingRuntime, config: object, request: RunRequest
    ) -> None:
        runtime.set_bin_count(config, request.n_bins)
        if request.running_avg_factor is not None:
            self.log.warning(
                "Running average factor is not used by power bins.")

    def format_frame(self, frame: UInt16[np.ndarray, "n"]) -> str:
        return "".join(f"{int(x)}\t" for x in frame) + "\n"


class Envelope(Service):
    """Envelope: amplitude of the received signal along the window."""

    kind = ServiceKind.ENVELOPE
    dtype = np.float64

    def __init__(self, name: str = "Envelope") -> None:
        super().__init__(name=name)

    def configure(
        self, runtime: SensingRuntime, config: object, request: RunRequest
    ) -> None:
        if request.running_avg_factor is not None:
            self.log.info(
                f"Using running average: {request.running_avg_factor}")
            runtime.set_running_average_factor(
                config, request.running_avg_factor)

    def format_frame(self, frame: Float64[np.ndarray, "n"]) -> str:
        """Render amplitudes rounded half-up to non-negative integers.

        Non-finite amplitudes are written as 0.
        """
        clean = np.nan_to_num(frame, nan=0.0, posinf=0.0, neginf=0.0)
        rounded = np.floor(np.maximum(clean, 0.0) + 0.5).astype(np.int64)
        return "".join(f"{x}\t" for x in rounded) + "\n"


class IQ(Service):
    """IQ: complex (floating point) samples along the window."""

    kind = ServiceKind.IQ
    dtype = np.complex64

    def __init__(self, name: str = "IQ") -> None:
        super().__init__(name=name)

    def configure(
        self, runtime: SensingRuntime, config: object, request: RunRequest
    ) -> None:
        runtime.set_iq_output_format(config, IQOutputFormat.FLOAT_COMPLEX)
        if request.running_avg_factor is not None:
            self.log.warning("Running average factor is not used by IQ.")

    def format_frame(self, frame: Complex64[np.ndarray, "n"]) -> str:
        return "".join(
            f"{x.real:.6f}\t{x.imag:.6f}\t" for x in frame) + "\n"


def get_service(kind: ServiceKind) -> Service:
    """Get the service variant for a service kind."""
    services: dict[ServiceKind, type[Service]] = {
        ServiceKind.POWER_BINS: PowerBins,
        ServiceKind.ENVELOPE: Envelope,
        ServiceKind.IQ: IQ,
    }
    return services[kind]()
