from iot_sandbox.components.base import (
    Category,
    ComponentDefinition,
    PinDefinition,
    PinRole,
    SensorProfile,
    WireRole,
)
from iot_sandbox.components.catalog import CATALOG, by_category, get_definition, get_pin
from iot_sandbox.components.network import NETWORK_MODULE_IDS
from iot_sandbox.components.sensors import SENSOR_PROFILES

__all__ = [
    'Category',
    'ComponentDefinition',
    'PinDefinition',
    'PinRole',
    'SensorProfile',
    'WireRole',
    'CATALOG',
    'by_category',
    'get_definition',
    'get_pin',
    'NETWORK_MODULE_IDS',
    'SENSOR_PROFILES',
]
