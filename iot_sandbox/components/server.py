"""Server side - PC running the Flask app, its database, a client browser"""

from iot_sandbox.components.base import Category, ComponentDefinition, PinRole, pin


PC_SERVER = ComponentDefinition(
    id='pc-server',
    category=Category.SERVER,
    name='PC server',
    description='Computer running the Flask server',
    width=110,
    height=90,
    pins=(
        pin('usb', 'USB', PinRole.USB, 25, 90),
        pin('network', 'NET', PinRole.DATA, 55, 90),
        pin('db', 'DB', PinRole.DATA, 85, 90),
    ),
)

DATABASE = ComponentDefinition(
    id='database',
    category=Category.SERVER,
    name='SQLite database',
    description='Local SQLite database hosted on the PC server',
    width=70,
    height=70,
    pins=(
        pin('connection', 'CONN', PinRole.DATA, 35, 0),
    ),
)

BROWSER = ComponentDefinition(
    id='browser',
    category=Category.SERVER,
    name='Client browser',
    description='Web browser client',
    width=90,
    height=70,
    pins=(
        pin('http', 'HTTP', PinRole.DATA, 45, 70),
    ),
)

SERVER_SIDE = (PC_SERVER, DATABASE, BROWSER)
