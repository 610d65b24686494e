"""Data logger errors.

All errors are terminal to a run; none are retried.
"""


class RSSLogError(Exception):
    """Base class for data logger errors."""

    pass


class InvalidOption(RSSLogError):
    """Invalid option value, or missing required option."""

    pass


class RuntimeInitFailed(RSSLogError):
    """Driver initialization or runtime activation failed."""

    pass


class ConfigCreationFailed(RSSLogError):
    """The runtime could not create a service configuration."""

    pass


class HandleCreationFailed(RSSLogError):
    """The runtime refused to create a service (e.g. invalid configuration)."""

    pass


class ActivationFailed(RSSLogError):
    """Service activation failed."""

    pass


class FrameRetrievalFailed(RSSLogError):
    """Polling the service for the next frame failed."""

    pass


class SinkOpenFailed(RSSLogError):
    """The output file could not be created."""

    pass


class SinkWriteFailed(RSSLogError):
    """Writing to the output failed."""

    pass


class DeactivationFailed(RSSLogError):
    """Service deactivation failed."""

    pass
