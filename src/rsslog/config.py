"""Data logger run configuration."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from enum import IntEnum
from typing import Any

import yaml

from .errors import InvalidOption

DEFAULT_RANGE_START = 0.07
"""Default measurement window start, in m."""

DEFAULT_RANGE_END = 0.5
"""Default measurement window end, in m."""

DEFAULT_FREQUENCY = 10.0
"""Default update rate, in Hz."""

DEFAULT_N_BINS = 10
"""Default number of power bins."""

DEFAULT_SENSOR = 1
"""Default sensor id."""

MAX_UPDATE_COUNT = 65535
"""Largest `--sweep-count`."""


class ServiceKind(IntEnum):
    """Measurement service type; values match the `--service-type` option."""

    POWER_BINS = 0
    ENVELOPE = 1
    IQ = 2

    @classmethod
    def parse(cls, value: int | str) -> "ServiceKind":
        """Parse a service kind from its number or (case-insensitive) name.

        Raises:
            InvalidOption: unknown service type.
        """
        if isinstance(value, str):
            key = value.strip()
            if key.isdigit():
                value = int(key)
            else:
                try:
                    return cls[key.upper().replace("-", "_")]
                except KeyError:
                    raise InvalidOption(f"Invalid service type: {value}")
        try:
            return cls(value)
        except ValueError:
            raise InvalidOption(f"Invalid service type: {value}")


@dataclass(frozen=True)
class RunRequest:
    """Logger run request.

    A request is created once from the parsed options, and never modified
    afterwards.

    Attributes:
        service_type: service to run.
        sensor: sensor id, in `(0, 4]`.
        range_start: measurement window start, in m.
        range_end: measurement window end, in m. May be less than
            `range_start`; the resulting (negative) length is passed on to
            the runtime as-is.
        frequency: update rate, in Hz; in `(0, 100000)`.
        gain: receiver gain in `[0, 1]`; `None` uses the service default.
        service_profile: 1-based service profile index; `0` uses the service
            default.
        running_avg_factor: time domain filtering strength in `[0, 1]`
            (envelope only); `None` uses the service default.
        n_bins: number of bins (power bins only), in `(0, 32]`.
        update_count: number of updates to log; `None` logs until interrupted.
        out: output file path; `None` writes to stdout.
        verbose: verbose runtime and logger output.
    """

    service_type: ServiceKind
    sensor: int = DEFAULT_SENSOR
    range_start: float = DEFAULT_RANGE_START
    range_end: float = DEFAULT_RANGE_END
    frequency: float = DEFAULT_FREQUENCY
    gain: float | None = None
    service_profile: int = 0
    running_avg_factor: float | None = None
    n_bins: int = DEFAULT_N_BINS
    update_count: int | None = None
    out: str | None = None
    verbose: bool = False

    @property
    def length(self) -> float:
        """Measurement window length, in m."""
        return self.range_end - self.range_start

    @property
    def wait_for_interrupt(self) -> bool:
        """Whether the run continues until interrupted."""
        return self.update_count is None

    def check(self) -> None:
        """Check option ranges.

        Raises:
            InvalidOption: if any option is out of range.
        """
        if not 0 < self.frequency < 100000:
            raise InvalidOption(f"Frequency out of range: {self.frequency}")
        if self.gain is not None and not 0 <= self.gain <= 1:
            raise InvalidOption(f"Gain out of range: {self.gain}")
        if not 0 < self.n_bins <= 32:
            raise InvalidOption(f"Number of bins out of range: {self.n_bins}")
        if (
            self.running_avg_factor is not None
            and not 0 <= self.running_avg_factor <= 1
        ):
            raise InvalidOption(
                "Running average factor out of range: "
                f"{self.running_avg_factor}")
        if not 0 < self.sensor <= 4:
            raise InvalidOption(f"Sensor id out of range: {self.sensor}")
        if self.service_profile < 0:
            raise InvalidOption(
                f"Service profile out of range: {self.service_profile}")
        if (
            self.update_count is not None
            and not 0 <= self.update_count <= MAX_UPDATE_COUNT
        ):
            raise InvalidOption(
                f"Sweep count out of range: {self.update_count}")

    def as_dict(self) -> dict:
        """Export as dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunRequest":
        """Create (and check) a request from a mapping of option values.

        Raises:
            InvalidOption: unknown keys, missing service type, values of the
                wrong type, or out of range values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidOption(f"Unknown options: {sorted(unknown)}")

        values = dict(data)
        kind = values.get("service_type")
        if kind is None:
            raise InvalidOption("Missing option service type.")
        if isinstance(kind, bool) or not isinstance(kind, (int, str)):
            raise InvalidOption(f"Invalid service type: {kind!r}")
        out = values.get("out")
        if out is not None and not isinstance(out, str):
            raise InvalidOption(f"Invalid out: {out!r}")
        if not isinstance(values.get("verbose", False), bool):
            raise InvalidOption(f"Invalid verbose: {values['verbose']!r}")
        values["service_type"] = ServiceKind.parse(values["service_type"])

        # YAML (and hand-written dicts) happily give us `1` for `1.0`
        for key, value in values.items():
            if key in _NUMERIC_FIELDS and value is not None:
                try:
                    values[key] = _NUMERIC_FIELDS[key](value)
                except (TypeError, ValueError) as e:
                    raise InvalidOption(f"Invalid {key}: {value!r}") from e

        request = cls(**values)
        request.check()
        return request


_NUMERIC_FIELDS = {
    "sensor": int, "range_start": float, "range_end": float,
    "frequency": float, "gain": float, "service_profile": int,
    "running_avg_factor": float, "n_bins": int, "update_count": int}


def load_config(path: str) -> dict:
    """Load logger options from a YAML file.

    The options can either be at the top level, or under a `logger` key::

        logger:
            service_type: envelope
            range_start: 0.2
            range_end: 0.6
            update_count: 100

    Returns:
        Option values, keyed by `RunRequest` field name.

    Raises:
        InvalidOption: the file cannot be read, or is not a mapping.
    """
    try:
        with open(path) as f:
            cfg = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InvalidOption(f"Could not load config {path}: {e}") from e

    if cfg is None:
        return {}
    if isinstance(cfg, dict) and "logger" in cfg:
        cfg = cfg["logger"]
    if not isinstance(cfg, dict):
        raise InvalidOption(f"Config {path} is not a mapping of options.")
    return cfg
