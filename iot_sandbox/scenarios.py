"""Preset topologies that can be loaded into an empty sandbox"""

from iot_sandbox.models import (
    ComponentState,
    DatabaseSnapshot,
    PlacedComponent,
    RouterConfig,
    ServerConfig,
    Route,
    Wire,
    World,
    default_database,
)

CLASSROOM_CODE = '''# Classroom temperature monitor
from microbit import *
import obloq

obloq.setup("School_WiFi", "12345678")
SERVER_URL = "http://192.168.1.100:5000/upload"

while True:
    temp = temperature()
    display.scroll(str(temp))
    obloq.http_get(SERVER_URL + "?temperature=" + str(temp))
    sleep(5000)
'''

IRRIGATION_CODE = '''# Smart irrigation
from microbit import *

THRESHOLD = 30

while True:
    humidity = pin0.read_analog() / 10
    display.scroll(str(int(humidity)))
    if humidity < THRESHOLD:
        pin1.write_digital(1)
        display.show(Image.ARROW_S)
    else:
        pin1.write_digital(0)
        display.show(Image.HAPPY)
    sleep(2000)
'''


def _placed(instance_id, definition_id, x, y, powered=False, value=None):
    return PlacedComponent(
        instance_id=instance_id,
        definition_id=definition_id,
        position=(x, y),
        state=ComponentState(powered=powered, active=powered, value=value),
    )


def classroom_temperature():
    """Temperature sensor on the expansion board, uploading over OBLOQ WiFi."""
    components = (
        _placed('microbit-1', 'microbit', 100, 100),
        _placed('expansion-1', 'expansion-board', 300, 80),
        _placed('temp-sensor-1', 'temp-humidity-sensor', 100, 280, value=25),
        _placed('obloq-1', 'obloq', 320, 280),
        _placed('router-1', 'router', 500, 150, powered=True),
        _placed('server-1', 'pc-server', 650, 120, powered=True),
        _placed('database-1', 'database', 650, 250, powered=True),
    )
    wires = (
        Wire('conn-1', 'temp-sensor-1', 'data', 'expansion-1', 'p0', 'data'),
        Wire('conn-2', 'temp-sensor-1', 'vcc', 'expansion-1', '3v-out1', 'power'),
        Wire('conn-3', 'temp-sensor-1', 'gnd', 'expansion-1', 'gnd-out1', 'ground'),
        Wire('conn-4', 'obloq-1', 'tx', 'expansion-1', 'rx', 'serial'),
        Wire('conn-5', 'obloq-1', 'rx', 'expansion-1', 'tx', 'serial'),
        Wire('conn-6', 'obloq-1', 'vcc', 'expansion-1', '3v-out2', 'power'),
        Wire('conn-7', 'obloq-1', 'gnd', 'expansion-1', 'gnd-out2', 'ground'),
        Wire('conn-8', 'obloq-1', 'wifi', 'router-1', 'wifi', 'wireless'),
    )
    return World(
        components=components,
        database=default_database(),
        server=ServerConfig(
            ip='192.168.1.100',
            port=5000,
            running=False,
            routes=(
                Route('/upload', 'GET', 'upload_data'),
                Route('/query', 'GET', 'query_data'),
            ),
        ),
        router=RouterConfig(ssid='School_WiFi', password='12345678', ip='192.168.1.1'),
        code=CLASSROOM_CODE,
    ).with_wires(wires)


def smart_irrigation():
    """Unwired starting point: soil reading drives a relay, no network."""
    components = (
        _placed('microbit-1', 'microbit', 100, 100),
        _placed('expansion-1', 'expansion-board', 300, 80),
        _placed('temp-sensor-1', 'temp-humidity-sensor', 100, 280, value=40),
        _placed('relay-1', 'relay', 200, 280),
    )
    return World(
        components=components,
        database=DatabaseSnapshot(),
        server=ServerConfig(ip='', port=5000, running=False, routes=()),
        router=RouterConfig(),
        code=IRRIGATION_CODE,
    )


SCENARIOS = {
    'classroom-temperature': ('Classroom temperature monitor', classroom_temperature),
    'smart-irrigation': ('Smart irrigation', smart_irrigation),
}


def load_scenario(scenario_id):
    """Fresh World for a scenario id, or None if unknown."""
    entry = SCENARIOS.get(scenario_id)
    if entry is None:
        return None
    return entry[1]()
