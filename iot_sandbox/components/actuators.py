"""Actuator modules - LED strip, buzzer, servo, relay"""

from iot_sandbox.components.base import Category, ComponentDefinition, PinRole, pin


LED_STRIP = ComponentDefinition(
    id='led-strip',
    category=Category.ACTUATOR,
    name='LED strip',
    description='WS2812B RGB LED strip',
    width=120,
    height=40,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 30, 40),
        pin('din', 'DIN', PinRole.DATA, 60, 40),
        pin('gnd', 'GND', PinRole.GROUND, 90, 40),
    ),
)

BUZZER = ComponentDefinition(
    id='buzzer',
    category=Category.ACTUATOR,
    name='Buzzer',
    description='Active buzzer module',
    width=50,
    height=50,
    pins=(
        pin('vcc', '+', PinRole.POWER, 15, 50),
        pin('io', 'IO', PinRole.DIGITAL, 25, 50),
        pin('gnd', '-', PinRole.GROUND, 35, 50),
    ),
)

SERVO = ComponentDefinition(
    id='servo',
    category=Category.ACTUATOR,
    name='Servo',
    description='SG90 9g micro servo',
    width=70,
    height=45,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 20, 45),
        pin('signal', 'SIG', PinRole.DIGITAL, 35, 45),
        pin('gnd', 'GND', PinRole.GROUND, 50, 45),
    ),
)

RELAY = ComponentDefinition(
    id='relay',
    category=Category.ACTUATOR,
    name='Relay',
    description='5V single channel relay module',
    width=60,
    height=65,
    pins=(
        pin('vcc', 'VCC', PinRole.POWER, 15, 65),
        pin('in', 'IN', PinRole.DIGITAL, 30, 65),
        pin('gnd', 'GND', PinRole.GROUND, 45, 65),
    ),
)

ACTUATORS = (LED_STRIP, BUZZER, SERVO, RELAY)
