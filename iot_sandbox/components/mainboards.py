"""Mainboards - micro:bit and its expansion board (always-powered sources)"""

from iot_sandbox.components.base import Category, ComponentDefinition, PinRole, pin


MICROBIT = ComponentDefinition(
    id='microbit',
    category=Category.MAINBOARD,
    name='micro:bit V2',
    description='BBC micro:bit microcontroller with 5x5 LED matrix and A/B buttons',
    width=160,
    height=130,
    pins=(
        pin('usb', 'USB', PinRole.USB, 80, 0),
        pin('p0', 'P0', PinRole.ANALOG, 30, 130),
        pin('p1', 'P1', PinRole.ANALOG, 60, 130),
        pin('p2', 'P2', PinRole.ANALOG, 90, 130),
        pin('3v', '3V', PinRole.POWER, 120, 130),
        pin('gnd', 'GND', PinRole.GROUND, 140, 130),
    ),
)

EXPANSION_BOARD = ComponentDefinition(
    id='expansion-board',
    category=Category.MAINBOARD,
    name='Expansion board',
    description='micro:bit expansion board exposing P0-P16, 3V and GND headers',
    width=280,
    height=200,
    pins=(
        # micro:bit slot
        pin('slot-p0', 'P0', PinRole.ANALOG, 40, 10),
        pin('slot-p1', 'P1', PinRole.ANALOG, 70, 10),
        pin('slot-p2', 'P2', PinRole.ANALOG, 100, 10),
        pin('slot-3v', '3V', PinRole.POWER, 130, 10),
        pin('slot-gnd', 'GND', PinRole.GROUND, 160, 10),

        pin('p0', 'P0', PinRole.ANALOG, 0, 40),
        pin('p1', 'P1', PinRole.ANALOG, 0, 60),
        pin('p2', 'P2', PinRole.ANALOG, 0, 80),
        pin('p3', 'P3', PinRole.DIGITAL, 0, 100),
        pin('p4', 'P4', PinRole.DIGITAL, 0, 120),
        pin('p5', 'P5', PinRole.DIGITAL, 0, 140),

        pin('p13', 'P13', PinRole.DIGITAL, 280, 40),
        pin('p14', 'P14', PinRole.DIGITAL, 280, 60),
        pin('p15', 'P15', PinRole.DIGITAL, 280, 80),
        pin('p16', 'P16', PinRole.DIGITAL, 280, 100),

        pin('3v-out1', '3V', PinRole.POWER, 30, 200),
        pin('3v-out2', '3V', PinRole.POWER, 55, 200),
        pin('3v-out3', '3V', PinRole.POWER, 80, 200),
        pin('3v-out4', '3V', PinRole.POWER, 105, 200),
        pin('gnd-out1', 'GND', PinRole.GROUND, 140, 200),
        pin('gnd-out2', 'GND', PinRole.GROUND, 165, 200),
        pin('gnd-out3', 'GND', PinRole.GROUND, 190, 200),
        pin('gnd-out4', 'GND', PinRole.GROUND, 215, 200),

        # serial header for the IoT module
        pin('tx', 'TX', PinRole.SERIAL_TX, 240, 200),
        pin('rx', 'RX', PinRole.SERIAL_RX, 265, 200),
    ),
)

# micro:bit pin -> expansion board slot pin, joined automatically on placement
SLOT_WIRING = (
    ('p0', 'slot-p0'),
    ('p1', 'slot-p1'),
    ('p2', 'slot-p2'),
    ('3v', 'slot-3v'),
    ('gnd', 'slot-gnd'),
)

MAINBOARDS = (MICROBIT, EXPANSION_BOARD)

# mainboards that run user code; at least one must be placed to run
MICROCONTROLLER_IDS = frozenset({MICROBIT.id})
