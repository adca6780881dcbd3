"""Static component catalog, keyed by definition id"""

from iot_sandbox.components.actuators import ACTUATORS
from iot_sandbox.components.mainboards import MAINBOARDS
from iot_sandbox.components.network import NETWORK_DEVICES
from iot_sandbox.components.sensors import SENSORS
from iot_sandbox.components.server import SERVER_SIDE


CATALOG = {
    definition.id: definition
    for definition in MAINBOARDS + SENSORS + ACTUATORS + NETWORK_DEVICES + SERVER_SIDE
}


def get_definition(definition_id):
    """Return the ComponentDefinition for an id, or None if unknown."""
    return CATALOG.get(definition_id)


def get_pin(definition_id, pin_id):
    definition = CATALOG.get(definition_id)
    if definition is None:
        return None
    return definition.get_pin(pin_id)


def by_category(category):
    return [d for d in CATALOG.values() if d.category == category]
