"""
Power and readiness evaluation of a placed topology.

Two-tier model: mainboards are self-powered; every other device is powered
when one of its power pins is wired straight to another instance's power pin.
Ground and serial wiring are checked as readiness issues but never gate the
powered flag. The report is derived from (components, wires) on demand and is
never stored.
"""

from dataclasses import dataclass, field

from iot_sandbox.components import NETWORK_MODULE_IDS, Category, PinRole, get_definition, get_pin


@dataclass
class SystemReport:
    issues: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    power_status: dict = field(default_factory=dict)

    @property
    def ready(self):
        return not self.issues

    def as_dict(self):
        return {
            'issues': list(self.issues),
            'warnings': list(self.warnings),
            'power_status': dict(self.power_status),
        }


def _has_matching_wire(instance_id, definition, role, by_id, wires):
    """True if a wire joins one of this instance's ``role`` pins to a ``role`` pin elsewhere."""
    for wire in wires:
        if not wire.touches(instance_id):
            continue
        own = definition.get_pin(wire.local_pin(instance_id))
        if own is None or own.role != role:
            continue
        other_id, other_pin_id = wire.far_end(instance_id)
        other = by_id.get(other_id)
        if other is None:
            continue
        other_pin = get_pin(other.definition_id, other_pin_id)
        if other_pin is not None and other_pin.role == role:
            return True
    return False


def serial_pins_wired(instance_id, wires):
    """(tx_wired, rx_wired) judged by the pin on the module's own end."""
    local = {w.local_pin(instance_id) for w in wires if w.touches(instance_id)}
    return 'tx' in local, 'rx' in local


def evaluate_system(components, wires):
    report = SystemReport()
    by_id = {c.instance_id: c for c in components}

    for comp in components:
        report.power_status[comp.instance_id] = False

    for wire in wires:
        if wire.from_instance not in by_id or wire.to_instance not in by_id:
            report.warnings.append(f"Wire {wire.id} references a missing component")

    for comp in components:
        definition = get_definition(comp.definition_id)
        if definition is None:
            report.warnings.append(f"Unknown component type: {comp.definition_id}")
            continue

        if definition.category == Category.MAINBOARD:
            report.power_status[comp.instance_id] = True
            continue
        if definition.category == Category.SERVER:
            continue

        if definition.has_role(PinRole.POWER):
            if _has_matching_wire(comp.instance_id, definition, PinRole.POWER, by_id, wires):
                report.power_status[comp.instance_id] = True
            else:
                report.issues.append(f"{definition.name} missing power")

        if definition.has_role(PinRole.GROUND):
            if not _has_matching_wire(comp.instance_id, definition, PinRole.GROUND, by_id, wires):
                report.issues.append(f"{definition.name} missing ground")

    for comp in components:
        if comp.definition_id not in NETWORK_MODULE_IDS:
            continue
        name = get_definition(comp.definition_id).name
        tx_wired, rx_wired = serial_pins_wired(comp.instance_id, wires)
        if not tx_wired:
            report.issues.append(f"{name} TX not wired")
        if not rx_wired:
            report.issues.append(f"{name} RX not wired")

    return report


def network_reachable(components, wires, router, report=None):
    """
    A network module can reach the server when it is powered, both its TX and
    RX pins are wired, and the router has an SSID configured.
    """
    if not router.ssid:
        return False
    if report is None:
        report = evaluate_system(components, wires)
    for comp in components:
        if comp.definition_id not in NETWORK_MODULE_IDS:
            continue
        if not report.power_status.get(comp.instance_id, False):
            continue
        tx_wired, rx_wired = serial_pins_wired(comp.instance_id, wires)
        if tx_wired and rx_wired:
            return True
    return False
