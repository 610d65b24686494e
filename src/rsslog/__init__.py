"""Radar Sensing Service Data Logger.

!!! usage

    From the command line, select a service with `-t` (0: power bins,
    1: envelope, 2: IQ); each frame is written as one tab-separated line:

    ```sh
    rsslog -t 1 -b 0.2 -e 0.6 -f 20 -c 100 -o envelope.tsv
    ```

    Without `-c`, the logger runs until interrupted (`Ctrl+C`).

    To use the API, create a [`RunRequest`][.] and call [`log_data`][.]
    with a [`SensingRuntime`][rsslog.runtime.]; or, drive a service directly
    with a [`DataLogger`][.]:

    ```python
    runtime = SimulatedRuntime(realtime=False)
    with activated(runtime):
        service = services.get_service(ServiceKind.IQ)
        config = service.build_configuration(
            runtime, RunRequest(ServiceKind.IQ))
        logger = DataLogger(
            runtime, service, TerminationSignal(), update_count=10)
        for frame in logger.stream(config):
            ...
        runtime.destroy_configuration(config)
    ```

??? example "Example Configuration"

    Options can also be loaded from a YAML file with `--config`; any flags
    which are passed take precedence.

    ```yaml
    logger:
        service_type: envelope
        sensor: 1
        range_start: 0.2
        range_end: 0.6
        frequency: 20.0
        gain: 0.5
        running_avg_factor: 0.7
        update_count: 100
        out: envelope.tsv
    ```
"""

from beartype.claw import beartype_this_package

beartype_this_package()

# ruff: noqa: E402
from . import errors, runtime, services
from .config import RunRequest, ServiceKind, load_config
from .interrupt import TerminationSignal
from .system import DataLogger, activated, log_data

__all__ = [
    "errors", "runtime", "services", "RunRequest", "ServiceKind",
    "load_config", "TerminationSignal", "DataLogger", "activated",
    "log_data"]
