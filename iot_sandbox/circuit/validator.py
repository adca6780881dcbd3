"""
Wire admissibility rules.

validate_connection() decides whether two instance pins may be joined, which
role the wire plays, and which advisory warnings apply. Hard errors:

  - unknown instance or pin
  - wiring a component to itself
  - serial TX joined to anything but RX (and RX to anything but TX)

Everything else is accepted, possibly with warnings: pins already in use,
power/ground joined to a different role, a WIFI or USB pin joined to a
different kind of pin.
"""

from dataclasses import dataclass, field

from iot_sandbox.components import PinRole, WireRole, get_pin

WIFI_PIN_ID = 'wifi'


@dataclass
class ValidationResult:
    valid: bool = True
    role: WireRole = WireRole.DATA
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def fail(self, message):
        self.valid = False
        self.errors.append(message)
        return self

    def as_dict(self):
        return {
            'valid': self.valid,
            'role': self.role.value,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


def resolve_pin(instance_id, pin_id, components):
    """Pin definition for (instance, pin) among the placed components, or None."""
    for comp in components:
        if comp.instance_id == instance_id:
            return get_pin(comp.definition_id, pin_id)
    return None


def pin_in_use(instance_id, pin_id, wires):
    return any(w.uses_pin(instance_id, pin_id) for w in wires)


def validate_connection(from_instance, from_pin, to_instance, to_pin, components, wires=()):
    result = ValidationResult()

    a = resolve_pin(from_instance, from_pin, components)
    b = resolve_pin(to_instance, to_pin, components)
    if a is None or b is None:
        return result.fail("Pin definition not found")

    if from_instance == to_instance:
        return result.fail("Cannot connect a component to itself")

    if pin_in_use(from_instance, from_pin, wires):
        result.warnings.append(f"{a.name} pin already has a connection")
    if pin_in_use(to_instance, to_pin, wires):
        result.warnings.append(f"{b.name} pin already has a connection")

    roles = {a.role, b.role}

    if a.role.is_serial or b.role.is_serial:
        result.role = WireRole.SERIAL
        if roles != {PinRole.SERIAL_TX, PinRole.SERIAL_RX}:
            for end, other in ((a, b), (b, a)):
                if end.role == PinRole.SERIAL_TX and other.role != PinRole.SERIAL_RX:
                    result.fail("TX pin must connect to an RX pin")
                    break
                if end.role == PinRole.SERIAL_RX and other.role != PinRole.SERIAL_TX:
                    result.fail("RX pin must connect to a TX pin")
                    break

    elif PinRole.POWER in roles or PinRole.GROUND in roles:
        if roles == {PinRole.POWER}:
            result.role = WireRole.POWER
        elif roles == {PinRole.GROUND}:
            result.role = WireRole.GROUND
        elif PinRole.POWER in roles:
            result.role = WireRole.POWER
            result.warnings.append("Power pin should connect to a VCC/3V pin")
        else:
            result.role = WireRole.GROUND
            result.warnings.append("GND pin should connect to a GND pin")

    elif roles == {PinRole.USB}:
        result.role = WireRole.DATA

    elif PinRole.USB in roles:
        result.role = WireRole.DATA
        result.warnings.append("USB port usually connects to another USB port")

    else:
        result.role = WireRole.DATA

    if a.id == WIFI_PIN_ID and b.id == WIFI_PIN_ID:
        result.role = WireRole.WIRELESS
    elif a.id == WIFI_PIN_ID or b.id == WIFI_PIN_ID:
        result.warnings.append("WIFI pin should connect to another WIFI pin")

    return result
