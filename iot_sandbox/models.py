"""Value types held by the world container.

Every type here is frozen. Mutations go through ``dataclasses.replace`` or the
``with_*`` helpers, which return a new value; readers holding an older value
keep seeing a consistent snapshot.
"""

from dataclasses import dataclass, field, replace


SENSORLOG_TABLE = 'sensorlog'


@dataclass(frozen=True)
class ComponentState:
    powered: bool = False
    active: bool = False
    value: object = None

    def as_dict(self):
        return {'powered': self.powered, 'active': self.active, 'value': self.value}


@dataclass(frozen=True)
class PlacedComponent:
    instance_id: str
    definition_id: str
    position: tuple = (0, 0)
    state: ComponentState = field(default_factory=ComponentState)

    def with_value(self, value):
        return replace(self, state=replace(self.state, value=value))

    def as_dict(self):
        return {
            'instance_id': self.instance_id,
            'definition_id': self.definition_id,
            'position': {'x': self.position[0], 'y': self.position[1]},
            'state': self.state.as_dict(),
        }


def wire_key(instance_a, pin_a, instance_b, pin_b):
    """Canonical, order-insensitive key for the endpoint pair of a wire."""
    ends = sorted([f"{instance_a}:{pin_a}", f"{instance_b}:{pin_b}"])
    return '|'.join(ends)


@dataclass(frozen=True)
class Wire:
    id: str
    from_instance: str
    from_pin: str
    to_instance: str
    to_pin: str
    role: str = 'data'
    valid: bool = True

    @property
    def key(self):
        return wire_key(self.from_instance, self.from_pin, self.to_instance, self.to_pin)

    def touches(self, instance_id):
        return self.from_instance == instance_id or self.to_instance == instance_id

    def uses_pin(self, instance_id, pin_id):
        return ((self.from_instance == instance_id and self.from_pin == pin_id) or
                (self.to_instance == instance_id and self.to_pin == pin_id))

    def local_pin(self, instance_id):
        """Pin id on this instance's end of the wire (from-side wins on ties)."""
        if self.from_instance == instance_id:
            return self.from_pin
        if self.to_instance == instance_id:
            return self.to_pin
        return None

    def far_end(self, instance_id):
        """(instance, pin) of the end opposite ``instance_id``."""
        if self.from_instance == instance_id:
            return self.to_instance, self.to_pin
        return self.from_instance, self.from_pin

    def as_dict(self):
        return {
            'id': self.id,
            'from_instance': self.from_instance,
            'from_pin': self.from_pin,
            'to_instance': self.to_instance,
            'to_pin': self.to_pin,
            'role': self.role,
            'valid': self.valid,
        }


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    primary_key: bool = False


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: tuple = ()

    def as_dict(self):
        return {
            'name': self.name,
            'columns': [
                {'name': c.name, 'type': c.type, 'primary_key': c.primary_key}
                for c in self.columns
            ],
        }


@dataclass(frozen=True)
class DatabaseSnapshot:
    tables: tuple = ()
    records: dict = field(default_factory=dict)

    def rows(self, table):
        return tuple(self.records.get(table, ()))

    def with_rows(self, table, rows):
        records = dict(self.records)
        records[table] = tuple(rows)
        return DatabaseSnapshot(tables=self.tables, records=records)

    def as_dict(self):
        return {
            'tables': [t.as_dict() for t in self.tables],
            'records': {name: [dict(r) for r in rows] for name, rows in self.records.items()},
        }


def default_database():
    """Schema of the classroom database: a sensor list and the upload log."""
    return DatabaseSnapshot(
        tables=(
            TableSchema('sensorlist', (
                Column('id', 'INTEGER', True),
                Column('name', 'TEXT'),
                Column('type', 'TEXT'),
                Column('location', 'TEXT'),
            )),
            TableSchema(SENSORLOG_TABLE, (
                Column('id', 'INTEGER', True),
                Column('sensor_id', 'INTEGER'),
                Column('value', 'REAL'),
                Column('timestamp', 'DATETIME'),
            )),
        ),
        records={
            'sensorlist': ({'id': 1, 'name': 'Classroom temperature sensor',
                            'type': 'temperature', 'location': 'Room 301'},),
            SENSORLOG_TABLE: (),
        },
    )


@dataclass(frozen=True)
class Route:
    path: str
    method: str
    handler: str


@dataclass(frozen=True)
class ServerConfig:
    ip: str = '192.168.1.100'
    port: int = 5000
    running: bool = False
    routes: tuple = ()

    @classmethod
    def from_settings(cls, cfg):
        return cls(
            ip=cfg.get('ip', '192.168.1.100'),
            port=int(cfg.get('port', 5000)),
            running=bool(cfg.get('running', False)),
            routes=tuple(
                Route(r['path'], r.get('method', 'GET').upper(), r['handler'])
                for r in cfg.get('routes', [])
            ),
        )

    def as_dict(self):
        return {
            'ip': self.ip,
            'port': self.port,
            'running': self.running,
            'routes': [{'path': r.path, 'method': r.method, 'handler': r.handler}
                       for r in self.routes],
        }


@dataclass(frozen=True)
class RouterConfig:
    ssid: str = ''
    password: str = ''
    ip: str = ''

    @classmethod
    def from_settings(cls, cfg):
        return cls(
            ssid=cfg.get('ssid', ''),
            password=cfg.get('password', ''),
            ip=cfg.get('ip', ''),
        )

    def as_dict(self):
        return {'ssid': self.ssid, 'password': self.password, 'ip': self.ip}


MIN_SPEED = 0.5
MAX_SPEED = 3.0


def clamp_speed(speed):
    return max(MIN_SPEED, min(MAX_SPEED, float(speed)))


@dataclass(frozen=True)
class SimulationClockState:
    running: bool = False
    speed: float = 1.0
    auto_fluctuation: bool = True
    last_tick: float = None


@dataclass(frozen=True)
class World:
    components: tuple = ()
    wires: tuple = ()
    database: DatabaseSnapshot = field(default_factory=default_database)
    server: ServerConfig = field(default_factory=ServerConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    clock: SimulationClockState = field(default_factory=SimulationClockState)
    code: str = ''
    code_deployed: bool = False
    wire_keys: frozenset = frozenset()

    def get_component(self, instance_id):
        for comp in self.components:
            if comp.instance_id == instance_id:
                return comp
        return None

    def has_wire(self, instance_a, pin_a, instance_b, pin_b):
        return wire_key(instance_a, pin_a, instance_b, pin_b) in self.wire_keys

    def with_components(self, components):
        return replace(self, components=tuple(components))

    def with_wires(self, wires):
        wires = tuple(wires)
        return replace(self, wires=wires, wire_keys=frozenset(w.key for w in wires))

    def with_component(self, component):
        """Replace the component sharing ``component.instance_id``."""
        return self.with_components(
            component if c.instance_id == component.instance_id else c
            for c in self.components
        )
