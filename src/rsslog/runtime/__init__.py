"""Sensing runtimes.

The logger drives a runtime through the [`SensingRuntime`][.] interface.
[`SimulatedRuntime`][.] generates synthetic frames, and is the runtime used
by the `rsslog` command line tool.
"""

from .base import FrameMetadata, IQOutputFormat, SensingRuntime
from .simulated import SimulatedRuntime

__all__ = [
    "FrameMetadata", "IQOutputFormat", "SensingRuntime", "SimulatedRuntime"]
