import random

from iot_sandbox.components.sensors import SENSOR_PROFILES


def fluctuate(current, profile, rng=None):
    """
    Next reading: current value plus a uniform delta in
    [-noise_amplitude, +noise_amplitude], clamped to [min, max] and rounded
    to the profile's decimal places.
    """
    rng = rng or random
    value = current + rng.uniform(-profile.noise_amplitude, profile.noise_amplitude)
    value = max(profile.min, min(profile.max, value))
    return round(value, profile.decimals)


class SensorFluctuator:
    """
    Produces plausible drifting readings for any sensor type that has a
    profile. Pass a seeded random.Random for reproducible sequences.
    """

    def __init__(self, rng=None, profiles=None):
        self.rng = rng or random.Random()
        self.profiles = profiles if profiles is not None else SENSOR_PROFILES

    def next_value(self, current, definition_id):
        """Unknown sensor types keep their current value."""
        profile = self.profiles.get(definition_id)
        if profile is None or current is None:
            return current
        return fluctuate(current, profile, self.rng)
