"""Data logger command line interface."""

import argparse
import logging
import sys
from collections.abc import Sequence

from .config import (
    DEFAULT_FREQUENCY,
    DEFAULT_N_BINS,
    DEFAULT_RANGE_END,
    DEFAULT_RANGE_START,
    DEFAULT_SENSOR,
    RunRequest,
    ServiceKind,
    load_config,
)
from .errors import InvalidOption
from .interrupt import TerminationSignal
from .runtime import SensingRuntime, SimulatedRuntime
from .system import log_data

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser which raises instead of exiting."""

    def error(self, message: str) -> None:
        raise InvalidOption(message)


def _service_type(value: str) -> ServiceKind:
    try:
        return ServiceKind.parse(value)
    except InvalidOption as e:
        raise argparse.ArgumentTypeError(str(e))


def _parser() -> _ArgumentParser:
    p = _ArgumentParser(
        prog="rsslog", add_help=False, argument_default=argparse.SUPPRESS,
        description="Log radar sensing service data to a file or stdout.")
    p.add_argument(
        "-h", "-?", "--help", action="store_true", dest="help",
        help="this help")
    p.add_argument(
        "-t", "--service-type", type=_service_type, dest="service_type",
        help="service type to be run: 0. Power bin, 1. Envelope, 2. IQ")
    p.add_argument(
        "-c", "--sweep-count", type=int, dest="update_count",
        help="number of updates; by default, logs until interrupted")
    p.add_argument(
        "-b", "--range-start", type=float, dest="range_start",
        help="start measurements at this distance [m], default "
        f"{DEFAULT_RANGE_START}")
    p.add_argument(
        "-e", "--range-end", type=float, dest="range_end",
        help=f"end measurements at this distance [m], default "
        f"{DEFAULT_RANGE_END}")
    p.add_argument(
        "-f", "--frequency", type=float, dest="frequency",
        help=f"update rate [Hz], default {DEFAULT_FREQUENCY}")
    p.add_argument(
        "-g", "--gain", type=float, dest="gain",
        help="gain in [0, 1] (default service dependent)")
    p.add_argument(
        "-n", "--number-of-bins", type=int, dest="n_bins",
        help=f"number of bins (power bins only), default {DEFAULT_N_BINS}")
    p.add_argument(
        "-o", "--out", dest="out", help="path to out file, default stdout")
    p.add_argument(
        "-y", "--service-profile", type=int, dest="service_profile",
        help="service profile to use (starting at index 1), default 0; 0 "
        "means that the default profile for the service is used")
    p.add_argument(
        "-r", "--running-avg-factor", type=float, dest="running_avg_factor",
        help="strength of time domain filtering in [0, 1] (envelope only, "
        "default service dependent)")
    p.add_argument(
        "-s", "--sensor", type=int, dest="sensor",
        help=f"select sensor id, default {DEFAULT_SENSOR}")
    p.add_argument(
        "-v", "--verbose", action="store_true", dest="verbose",
        help="set log level to verbose")
    p.add_argument(
        "--config", dest="config",
        help="YAML file with default options; flags take precedence")
    return p


def parse_request(
    argv: Sequence[str] | None = None
) -> RunRequest | None:
    """Parse command line arguments.

    Returns:
        The run request, or `None` if help was requested (and printed).

    Raises:
        InvalidOption: invalid flag or value, or missing service type.
    """
    parser = _parser()
    args = vars(parser.parse_args(argv))

    if args.pop("help", False):
        parser.print_help()
        return None

    values = {}
    config = args.pop("config", None)
    if config is not None:
        values.update(load_config(config))
    values.update(args)
    return RunRequest.from_dict(values)


def main(
    argv: Sequence[str] | None = None,
    runtime: SensingRuntime | None = None,
    signal: TerminationSignal | None = None
) -> int:
    """Run the data logger.

    Args:
        argv: command line arguments; `sys.argv[1:]` by default.
        runtime: sensing runtime; a [`SimulatedRuntime`][rsslog.runtime.] by
            default.
        signal: termination signal; by default, a new signal which is set on
            `SIGINT`.

    Returns:
        Process exit code.
    """
    try:
        request = parse_request(argv)
    except InvalidOption as e:
        print(e, file=sys.stderr)
        _parser().print_usage(sys.stderr)
        return EXIT_FAILURE
    if request is None:
        return EXIT_FAILURE

    logging.basicConfig(
        level=logging.DEBUG if request.verbose else logging.WARNING)

    if signal is None:
        signal = TerminationSignal()
        signal.install()
    if runtime is None:
        runtime = SimulatedRuntime()

    if not log_data(runtime, request, signal):
        return EXIT_FAILURE
    return EXIT_SUCCESS
