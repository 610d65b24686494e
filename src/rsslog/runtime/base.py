"""Sensing runtime interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..config import ServiceKind


class IQOutputFormat(Enum):
    """IQ service output representation."""

    INT16_COMPLEX = 0
    FLOAT_COMPLEX = 1


@dataclass(frozen=True)
class FrameMetadata:
    """Service output shape, fixed for the lifetime of a service.

    Attributes:
        data_length: number of elements (bins, or samples) per frame.
        start_m: actual start of the measured window, in m.
        length_m: actual length of the measured window, in m.
    """

    data_length: int
    start_m: float = 0.0
    length_m: float = 0.0


class SensingRuntime(ABC):
    """Radar sensing runtime.

    The runtime owns configuration validation, sensor control, sampling and
    signal processing; the logger only handles opaque configuration and
    service handles through this interface.

    !!! info "Lifecycle"

        1. [`initialize`][.] the driver/hardware abstraction layer, once.
        2. [`activate`][.] the runtime.
        3. Create a configuration, and a service from it. A service must be
            activated before polling with [`get_next`][.], and deactivated
            and destroyed afterwards.
        4. Destroy the configuration, and [`deactivate`][.] the runtime.

    Creation calls return `None` if the runtime refuses; other lifecycle calls
    return `False` on failure.
    """

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize the driver layer; must succeed before any other call."""
        ...

    @abstractmethod
    def activate(self, verbose: bool = False) -> bool:
        """Activate the runtime."""
        ...

    @abstractmethod
    def deactivate(self) -> None:
        """Deactivate the runtime."""
        ...

    # -- Configurations --

    @abstractmethod
    def create_configuration(self, kind: ServiceKind) -> object | None:
        ...

    @abstractmethod
    def destroy_configuration(self, config: object) -> None:
        ...

    @abstractmethod
    def set_profile(self, config: object, profile: int) -> None:
        """Set the 1-based service profile."""
        ...

    @abstractmethod
    def set_window(self, config: object, start: float, length: float) -> None:
        """Set requested measurement window, in m."""
        ...

    @abstractmethod
    def set_repetition_rate(self, config: object, frequency: float) -> None:
        """Set streaming repetition mode at `frequency`, in Hz."""
        ...

    @abstractmethod
    def set_sensor(self, config: object, sensor: int) -> None:
        ...

    @abstractmethod
    def set_receiver_gain(self, config: object, gain: float) -> None:
        ...

    @abstractmethod
    def set_bin_count(self, config: object, n_bins: int) -> None:
        """Set requested bin count (power bins only)."""
        ...

    @abstractmethod
    def set_running_average_factor(
        self, config: object, factor: float
    ) -> None:
        """Set time domain filtering strength (envelope only)."""
        ...

    @abstractmethod
    def set_iq_output_format(
        self, config: object, fmt: IQOutputFormat
    ) -> None:
        """Set the IQ output representation (IQ only)."""
        ...

    # -- Services --

    @abstractmethod
    def create_service(self, config: object) -> object | None:
        ...

    @abstractmethod
    def get_metadata(self, handle: object) -> FrameMetadata:
        ...

    @abstractmethod
    def activate_service(self, handle: object) -> bool:
        ...

    @abstractmethod
    def deactivate_service(self, handle: object) -> bool:
        ...

    @abstractmethod
    def destroy_service(self, handle: object) -> None:
        ...

    @abstractmethod
    def get_next(self, handle: object, buffer: np.ndarray) -> bool:
        """Block until the next frame is ready, and write it into `buffer`.

        Args:
            handle: active service.
            buffer: frame buffer, sized by [`get_metadata`][..]; written in
                place.

        Returns:
            Whether a frame was retrieved.
        """
        ...
