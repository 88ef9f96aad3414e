"""Material tags and shared parameter validation."""

from collections.abc import Sequence
from enum import IntEnum

from src.spheretrace.errors import ConfigurationError


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Stored in the device material table and switched on by the integrator's
    material dispatch. Adding a material means adding a tag here and a branch
    there.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


def validate_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Check an RGB albedo and return it as a float tuple.

    Raises:
        ConfigurationError: If there are not three components or any component
            is outside [0, 1] (which would amplify light along a path).
    """
    if len(albedo) != 3:
        raise ConfigurationError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ConfigurationError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))
