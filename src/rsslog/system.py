"""High level data logging API."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import numpy as np

from .config import RunRequest
from .errors import (
    ActivationFailed,
    DeactivationFailed,
    FrameRetrievalFailed,
    HandleCreationFailed,
    RSSLogError,
    RuntimeInitFailed,
)
from .interrupt import TerminationSignal
from .runtime import FrameMetadata, SensingRuntime
from .services import Service, get_service
from .sink import OutputSink


class DataLogger:
    """Acquisition driver for a single service.

    Each run goes through the service lifecycle::

        create -> activate -> (poll, write)* -> deactivate -> destroy

    The service is always destroyed once it has been created, and always
    deactivated once it has been activated, no matter how the run ends. If a
    run fails part way, frames which were already written stay in the output.

    !!! info "Termination"

        - With `update_count=None`, frames are logged until the
            `signal` is set. The signal is checked once before every poll; a
            poll which is already in progress is not interrupted.
        - Otherwise, exactly `update_count` frames are logged, and the
            `signal` is ignored.

    Args:
        runtime: sensing runtime.
        service: service variant to run.
        signal: termination signal.
        out: output file; `None` writes to stdout.
        update_count: number of frames to log; `None` to run until
            interrupted.
        name: friendly name for logging.

    Attributes:
        emitted: number of frames written during the last run.
    """

    def __init__(
        self, runtime: SensingRuntime, service: Service,
        signal: TerminationSignal, *, out: str | None = None,
        update_count: int | None = None, name: str = "DataLogger"
    ) -> None:
        self.runtime = runtime
        self.service = service
        self.signal = signal
        self.out = out
        self.update_count = update_count
        self.log = logging.getLogger(name)
        self.emitted = 0

    def _statistics(self, metadata: FrameMetadata) -> None:
        self.log.info("{}: {} elements per frame, {:.3f}-{:.3f} m".format(
            self.service.name, metadata.data_length, metadata.start_m,
            metadata.start_m + metadata.length_m))
        if metadata.data_length == 0:
            self.log.warning("Service reports empty frames.")

    @contextmanager
    def _session(self, configuration: object) -> Iterator[tuple]:
        """Create a service, and destroy it on exit.

        Yields:
            The service handle, and a frame buffer sized for it.
        """
        handle = self.runtime.create_service(configuration)
        if handle is None:
            raise HandleCreationFailed(
                f"Could not create {self.service.name} service.")

        try:
            metadata = self.runtime.get_metadata(handle)
            self._statistics(metadata)
            yield handle, self.service.allocate(metadata)
        finally:
            self.runtime.destroy_service(handle)
            self.log.debug("Service destroyed.")

    @contextmanager
    def _activated(self, handle: object) -> Iterator[None]:
        """Activate a service, and deactivate it on exit.

        Deactivation failure is an error only if everything else succeeded;
        otherwise, the original error is kept.
        """
        if not self.runtime.activate_service(handle):
            raise ActivationFailed(
                f"Could not activate {self.service.name} service.")
        self.log.debug("Service activated.")

        try:
            yield
        except BaseException:
            if not self.runtime.deactivate_service(handle):
                self.log.warning("Service deactivation failed.")
            raise
        if not self.runtime.deactivate_service(handle):
            raise DeactivationFailed(
                f"Could not deactivate {self.service.name} service.")
        self.log.debug("Service deactivated.")

    def _running(self, updates: int) -> bool:
        if self.update_count is None:
            return not self.signal.is_set()
        return updates < self.update_count

    def _poll(self, handle: object, frame: np.ndarray) -> Iterator[np.ndarray]:
        updates = 0
        while self._running(updates):
            if not self.runtime.get_next(handle, frame):
                raise FrameRetrievalFailed(
                    f"{self.service.name} data not properly retrieved.")
            yield frame
            updates += 1

    def stream(self, configuration: object) -> Iterator[np.ndarray]:
        """Iterator which yields successive frames.

        !!! warning

            The same buffer is yielded (and overwritten) for every frame; copy
            it if it needs to outlive the next iteration.

        Args:
            configuration: configuration created by the service's
                [`build_configuration`][rsslog.services.Service.].

        Yields:
            Frames, until the termination condition is met.

        Raises:
            RSSLogError: service creation, activation, frame retrieval or
                deactivation failed.
        """
        with self._session(configuration) as (handle, frame):
            with self._activated(handle):
                yield from self._poll(handle, frame)

    def run(self, configuration: object) -> bool:
        """Log frames to the output.

        Args:
            configuration: configuration created by the service's
                [`build_configuration`][rsslog.services.Service.]. The
                configuration is not destroyed.

        Returns:
            `True` if all frames were written, and the service was cleanly
                torn down; `False` otherwise (the reason is logged).
        """
        self.emitted = 0
        try:
            with self._session(configuration) as (handle, frame):
                with self._activated(handle), OutputSink(self.out) as sink:
                    try:
                        for frame in self._poll(handle, frame):
                            sink.write_line(self.service.format_frame(frame))
                            self.emitted += 1
                    except FrameRetrievalFailed:
                        sink.flush()
                        raise
        except RSSLogError as e:
            self.log.error(e)
            return False

        self.log.info(f"{self.emitted} frames logged.")
        return True


@contextmanager
def activated(runtime: SensingRuntime, verbose: bool = False) -> Iterator[None]:
    """Initialize and activate a runtime, and deactivate it on exit.

    Raises:
        RuntimeInitFailed: driver initialization or activation failed.
    """
    if not runtime.initialize():
        raise RuntimeInitFailed("Driver initialization failed.")
    if not runtime.activate(verbose=verbose):
        raise RuntimeInitFailed("Runtime activation failed.")
    try:
        yield
    finally:
        runtime.deactivate()


def log_data(
    runtime: SensingRuntime, request: RunRequest, signal: TerminationSignal,
    name: str = "DataLogger"
) -> bool:
    """Run the data logger for a request.

    Args:
        runtime: sensing runtime; initialized and activated here.
        request: logger options.
        signal: termination signal, for runs without an update count.
        name: friendly name for logging.

    Returns:
        Whether the run succeeded.
    """
    log = logging.getLogger(name)
    service = get_service(request.service_type)

    try:
        with activated(runtime, verbose=request.verbose):
            configuration = service.build_configuration(runtime, request)
            try:
                logger = DataLogger(
                    runtime, service, signal, out=request.out,
                    update_count=request.update_count, name=name)
                success = logger.run(configuration)
            finally:
                runtime.destroy_configuration(configuration)
    except RSSLogError as e:
        log.error(e)
        return False

    if not success:
        log.error(f"{service.name} logging failed.")
    return success
