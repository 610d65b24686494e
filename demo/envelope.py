"""Simple live envelope visualization demo."""

import logging

import numpy as np
from matplotlib import pyplot as plt

import rsslog
from rsslog.runtime import SimulatedRuntime

logging.basicConfig(level=logging.INFO)

request = rsslog.RunRequest(
    rsslog.ServiceKind.ENVELOPE, range_start=0.1, range_end=0.6,
    frequency=20.0, running_avg_factor=0.5)
runtime = SimulatedRuntime(target=0.35)
signal = rsslog.TerminationSignal()
signal.install()

service = rsslog.services.get_service(request.service_type)

# Create a figure
plt.ion()  # Enable interactive mode
fig, ax = plt.subplots()
line, = ax.plot([], [])
ax.set_xlabel("Distance [m]")
ax.set_ylabel("Amplitude")

with rsslog.activated(runtime):
    config = service.build_configuration(runtime, request)
    logger = rsslog.DataLogger(runtime, service, signal)
    for frame in logger.stream(config):
        distance = request.range_start + np.arange(len(frame)) * (
            request.length / len(frame))
        line.set_data(distance, frame)
        ax.set_xlim(distance[0], distance[-1])
        ax.set_ylim(0, np.max(frame) * 1.1)
        plt.pause(0.001)
    runtime.destroy_configuration(config)
