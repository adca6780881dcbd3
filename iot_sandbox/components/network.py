"""Network devices - WiFi IoT module (OBLOQ) and the wireless router"""

from iot_sandbox.components.base import Category, ComponentDefinition, PinRole, pin


def _iot_module_pins():
    return (
        pin('vcc', 'VCC', PinRole.POWER, 15, 70),
        pin('gnd', 'GND', PinRole.GROUND, 35, 70),
        pin('tx', 'TX', PinRole.SERIAL_TX, 55, 70),
        pin('rx', 'RX', PinRole.SERIAL_RX, 75, 70),
        # wireless link to the router
        pin('wifi', 'WIFI', PinRole.DATA, 45, 0),
    )


IOT_MODULE = ComponentDefinition(
    id='iot-module',
    category=Category.NETWORK,
    name='IoT module',
    description='WiFi IoT communication module',
    width=90,
    height=70,
    pins=_iot_module_pins(),
)

OBLOQ = ComponentDefinition(
    id='obloq',
    category=Category.NETWORK,
    name='OBLOQ IoT module',
    description='DFRobot OBLOQ WiFi IoT module',
    width=90,
    height=70,
    pins=_iot_module_pins(),
)

ROUTER = ComponentDefinition(
    id='router',
    category=Category.NETWORK,
    name='Wireless router',
    description='WiFi router',
    width=100,
    height=70,
    pins=(
        pin('wifi', 'WIFI', PinRole.DATA, 50, 0),
        pin('wan', 'WAN', PinRole.DATA, 25, 70),
        pin('lan', 'LAN', PinRole.DATA, 75, 70),
    ),
)

# definitions that carry serial TX/RX to the mainboard and uplink over WiFi
NETWORK_MODULE_IDS = frozenset({IOT_MODULE.id, OBLOQ.id})

NETWORK_DEVICES = (IOT_MODULE, OBLOQ, ROUTER)
