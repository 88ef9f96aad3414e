"""Exception hierarchy for the path tracer.

Configuration problems are reported when a camera, material, sphere or render
request is constructed, before any Taichi kernel runs. Failures during the
kernel launch surface as ``RenderError`` and never come with a partial image.
"""


class SpheretraceError(Exception):
    """Base class for all errors raised by spheretrace."""


class ConfigurationError(SpheretraceError, ValueError):
    """Invalid camera, material, geometry or render settings."""


class CapacityError(SpheretraceError, RuntimeError):
    """A preallocated Taichi field ran out of slots."""


class RenderError(SpheretraceError, RuntimeError):
    """A rendering worker failed and the image buffer was discarded."""
