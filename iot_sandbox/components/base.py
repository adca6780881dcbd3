"""Base definitions shared by every catalog component"""

from dataclasses import dataclass, field
from enum import Enum


class PinRole(str, Enum):
    """Electrical/logical role of a pin. Closed set."""

    POWER = 'power'
    GROUND = 'ground'
    DIGITAL = 'digital'
    ANALOG = 'analog'
    SERIAL_TX = 'serial_tx'
    SERIAL_RX = 'serial_rx'
    USB = 'usb'
    DATA = 'data'

    @property
    def is_serial(self):
        return self in (PinRole.SERIAL_TX, PinRole.SERIAL_RX)


class WireRole(str, Enum):
    """Role a validated wire plays in the topology."""

    POWER = 'power'
    GROUND = 'ground'
    DATA = 'data'
    SERIAL = 'serial'
    WIRELESS = 'wireless'


class Category:
    MAINBOARD = 'mainboard'
    SENSOR    = 'sensor'
    ACTUATOR  = 'actuator'
    NETWORK   = 'network'
    SERVER    = 'server'

    ALL = (MAINBOARD, SENSOR, ACTUATOR, NETWORK, SERVER)


@dataclass(frozen=True)
class PinDefinition:
    id: str
    name: str
    role: PinRole
    position: tuple = (0, 0)

    def as_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'role': self.role.value,
            'position': {'x': self.position[0], 'y': self.position[1]},
        }


@dataclass(frozen=True)
class ComponentDefinition:
    id: str
    category: str
    name: str
    description: str = ''
    width: int = 0
    height: int = 0
    pins: tuple = field(default_factory=tuple)

    def get_pin(self, pin_id):
        """Return the pin with the given id, or None."""
        for pin in self.pins:
            if pin.id == pin_id:
                return pin
        return None

    def has_role(self, role):
        return any(pin.role == role for pin in self.pins)

    def as_dict(self):
        return {
            'id': self.id,
            'category': self.category,
            'name': self.name,
            'description': self.description,
            'width': self.width,
            'height': self.height,
            'pins': [pin.as_dict() for pin in self.pins],
        }


@dataclass(frozen=True)
class SensorProfile:
    """Range, noise and display precision of a simulated sensor reading."""

    min: float
    max: float
    noise_amplitude: float
    decimals: int
    unit: str = ''
    default_value: float = 25


def pin(pin_id, name, role, x, y):
    """Shorthand used by the category modules."""
    return PinDefinition(id=pin_id, name=name, role=role, position=(x, y))
