"""Sensor modules and their simulated reading profiles"""

from iot_sandbox.components.base import (
    Category,
    ComponentDefinition,
    PinRole,
    SensorProfile,
    pin,
)


TEMP_HUMIDITY_SENSOR = ComponentDefinition(
    id='temp-humidity-sensor',
    category=Category.SENSOR,
    name='Temperature/humidity sensor',
    description='DHT11/DHT22 temperature and humidity module',
    width=80,
    height=60,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 20, 60),
        pin('data', 'DATA', PinRole.DATA, 40, 60),
        pin('gnd', 'GND', PinRole.GROUND, 60, 60),
    ),
)

LIGHT_SENSOR = ComponentDefinition(
    id='light-sensor',
    category=Category.SENSOR,
    name='Light sensor',
    description='Photoresistor light sensor module',
    width=70,
    height=55,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 15, 55),
        pin('ao', 'AO', PinRole.ANALOG, 35, 55),
        pin('gnd', 'GND', PinRole.GROUND, 55, 55),
    ),
)

INFRARED_SENSOR = ComponentDefinition(
    id='infrared-sensor',
    category=Category.SENSOR,
    name='Infrared sensor',
    description='Infrared obstacle / presence sensor',
    width=75,
    height=50,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 18, 50),
        pin('out', 'OUT', PinRole.DIGITAL, 38, 50),
        pin('gnd', 'GND', PinRole.GROUND, 58, 50),
    ),
)

SOUND_SENSOR = ComponentDefinition(
    id='sound-sensor',
    category=Category.SENSOR,
    name='Sound sensor',
    description='Microphone sound level module',
    width=70,
    height=55,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 15, 55),
        pin('ao', 'AO', PinRole.ANALOG, 35, 55),
        pin('gnd', 'GND', PinRole.GROUND, 55, 55),
    ),
)

SENSORS = (TEMP_HUMIDITY_SENSOR, LIGHT_SENSOR, INFRARED_SENSOR, SOUND_SENSOR)

SENSOR_PROFILES = {
    'temp-humidity-sensor': SensorProfile(
        min=-10, max=50, noise_amplitude=2, decimals=1, unit='°C', default_value=25,
    ),
    'light-sensor': SensorProfile(
        min=0, max=1000, noise_amplitude=50, decimals=0, unit='lux', default_value=500,
    ),
    'sound-sensor': SensorProfile(
        min=0, max=120, noise_amplitude=10, decimals=0, unit='dB', default_value=40,
    ),
    'infrared-sensor': SensorProfile(
        min=0, max=1, noise_amplitude=0, decimals=0, unit='', default_value=0,
    ),
}

# initial reading for a sensor type with no profile
FALLBACK_READING = 25


def default_reading(definition_id):
    profile = SENSOR_PROFILES.get(definition_id)
    return profile.default_value if profile else FALLBACK_READING
