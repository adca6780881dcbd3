"""
Mock execution of the code deployed to the micro:bit.

Nothing is interpreted: a handful of well-known MicroPython calls are spotted
in the source text and turned into the actions the board would perform, plus
the value it would show on its LED display.
"""

from dataclasses import dataclass

from iot_sandbox.components import Category, get_definition

TEMPERATURE_SENSOR_ID = 'temp-humidity-sensor'


@dataclass(frozen=True)
class ExecutionResult:
    actions: tuple = ()
    display_value: object = None


def sensor_readings(components, power_status):
    """Current value of the first powered sensor of each type, keyed by definition id."""
    readings = {}
    for comp in components:
        definition = get_definition(comp.definition_id)
        if definition is None or definition.category != Category.SENSOR:
            continue
        if not power_status.get(comp.instance_id) or comp.state.value is None:
            continue
        readings.setdefault(comp.definition_id, comp.state.value)
    return readings


def simulate_execution(code, sensor_values):
    actions = []
    display_value = None

    if 'temperature()' in code:
        reading = sensor_values.get(TEMPERATURE_SENSOR_ID)
        if reading is not None:
            display_value = reading
            actions.append(f"Read temperature: {reading}°C")

    if 'display.scroll' in code:
        actions.append("LED display scrolling text")
    if 'obloq.http_post' in code:
        actions.append("Sending HTTP POST request")
    if 'obloq.http_get' in code:
        actions.append("Sending HTTP GET request")

    return ExecutionResult(tuple(actions), display_value)
