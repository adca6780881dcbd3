"""Sandbox controller - owns the world, the log and the scheduler"""

import itertools
from dataclasses import replace

from iot_sandbox.circuit import evaluate_system, validate_connection
from iot_sandbox.components import Category, by_category, get_definition
from iot_sandbox.components.mainboards import EXPANSION_BOARD, MICROBIT, SLOT_WIRING
from iot_sandbox.components.sensors import default_reading
from iot_sandbox.controllers.simulation_scheduler import SimulationScheduler
from iot_sandbox.errors import SandboxError, SimulationNotReady, UnknownComponentError
from iot_sandbox.event_log import EventLog
from iot_sandbox.models import (
    ComponentState,
    PlacedComponent,
    RouterConfig,
    ServerConfig,
    SimulationClockState,
    Wire,
    World,
    clamp_speed,
)
from iot_sandbox.scenarios import SCENARIOS, load_scenario
from iot_sandbox.settings import DEFAULT_SETTINGS, merge_defaults
from iot_sandbox.simulators import (
    HttpRequest,
    SensorFluctuator,
    dispatch,
    sensor_readings,
    simulate_execution,
)
from iot_sandbox.world import WorldStore

SPEED_STEP = 0.5


class SandboxController:
    """Controller for one sandbox session"""

    def __init__(self, settings=None, timer_source=None, rng=None, event_log=None):
        self.settings = merge_defaults(settings or DEFAULT_SETTINGS)
        sim_cfg = self.settings['simulation']
        log_cfg = self.settings['log']

        self.log = event_log or EventLog(
            max_entries=int(log_cfg.get('max_entries', 100)),
            echo=bool(log_cfg.get('echo', False)),
        )
        self.store = WorldStore(self._initial_world())
        self.scheduler = SimulationScheduler(
            self.store,
            self.log,
            timer_source=timer_source,
            fluctuator=SensorFluctuator(rng),
            fluctuation_period_ms=sim_cfg.get('fluctuation_period_ms'),
            dispatch_period_ms=sim_cfg.get('dispatch_period_ms'),
        )
        self._wire_seq = itertools.count(1)

        scenario = self.settings.get('scenario')
        if scenario:
            self.load_scenario(scenario)

    def _initial_world(self):
        sim_cfg = self.settings['simulation']
        return World(
            server=ServerConfig.from_settings(self.settings['server']),
            router=RouterConfig.from_settings(self.settings['router']),
            clock=SimulationClockState(
                speed=clamp_speed(sim_cfg.get('speed', 1.0)),
                auto_fluctuation=bool(sim_cfg.get('auto_fluctuation', True)),
            ),
        )

    @property
    def world(self):
        return self.store.read()

    # ========== COMPONENTS ==========

    def place_component(self, definition_id, position=(0, 0)):
        """Place a catalog component; returns the new instance id."""
        definition = get_definition(definition_id)
        if definition is None:
            raise UnknownComponentError(definition_id)

        value = None
        if definition.category == Category.SENSOR:
            value = default_reading(definition_id)

        placed = {}

        def apply(world):
            instance_id = self._new_instance_id(world, definition_id)
            placed['id'] = instance_id
            comp = PlacedComponent(
                instance_id=instance_id,
                definition_id=definition_id,
                position=tuple(position),
                state=ComponentState(value=value),
            )
            return world.with_components(world.components + (comp,))

        self.store.update(apply)
        self._auto_connect_slot()
        return placed['id']

    def _new_instance_id(self, world, definition_id):
        taken = {c.instance_id for c in world.components}
        for n in itertools.count(1):
            candidate = f"{definition_id}-{n}"
            if candidate not in taken:
                return candidate

    def _auto_connect_slot(self):
        """Plug the micro:bit into the expansion board once both are placed."""
        plugged = []

        def apply(world):
            microbit = next((c for c in world.components if c.definition_id == MICROBIT.id), None)
            board = next((c for c in world.components if c.definition_id == EXPANSION_BOARD.id), None)
            if microbit is None or board is None:
                return world
            joined = any(
                w.touches(microbit.instance_id) and w.touches(board.instance_id)
                for w in world.wires
            )
            if joined:
                return world
            wires = list(world.wires)
            for mb_pin, slot_pin in SLOT_WIRING:
                result = validate_connection(
                    microbit.instance_id, mb_pin, board.instance_id, slot_pin,
                    world.components, wires,
                )
                wires.append(Wire(
                    id=self._new_wire_id(wires),
                    from_instance=microbit.instance_id,
                    from_pin=mb_pin,
                    to_instance=board.instance_id,
                    to_pin=slot_pin,
                    role=result.role.value,
                    valid=result.valid,
                ))
            plugged.append(True)
            return world.with_wires(wires)

        self.store.update(apply)
        if plugged:
            self.log.info('System', "micro:bit plugged into the expansion board")

    def remove_component(self, instance_id):
        """Remove an instance and every wire touching it. Unknown ids are ignored."""
        removed = {}

        def apply(world):
            if world.get_component(instance_id) is None:
                return world
            keep = [w for w in world.wires if not w.touches(instance_id)]
            removed['wires'] = len(world.wires) - len(keep)
            world = world.with_components(c for c in world.components if c.instance_id != instance_id)
            return world.with_wires(keep)

        self.store.update(apply)
        if removed.get('wires'):
            self.log.info('System', f"{instance_id} removed, {removed['wires']} wire(s) disconnected")
        return removed.get('wires', 0)

    def move_component(self, instance_id, position):
        comp = self.world.get_component(instance_id)
        if comp is None:
            raise UnknownComponentError(instance_id)

        def apply(world):
            current = world.get_component(instance_id)
            if current is None:
                return world
            return world.with_component(replace(current, position=tuple(position)))

        self.store.update(apply)

    def set_sensor_value(self, instance_id, value):
        """Manual override of a sensor reading (e.g. from a UI slider)."""
        if self.world.get_component(instance_id) is None:
            raise UnknownComponentError(instance_id)

        def apply(world):
            current = world.get_component(instance_id)
            if current is None:
                return world
            return world.with_component(current.with_value(value))

        self.store.update(apply)

    # ========== WIRES ==========

    def _new_wire_id(self, wires):
        taken = {w.id for w in wires}
        while True:
            candidate = f"conn-{next(self._wire_seq)}"
            if candidate not in taken:
                return candidate

    def request_wire(self, from_instance, from_pin, to_instance, to_pin):
        """
        Validate a wire and persist it when accepted.
        Exact duplicates (in either direction) are rejected here.
        """
        outcome = {}

        def apply(world):
            result = validate_connection(
                from_instance, from_pin, to_instance, to_pin,
                world.components, world.wires,
            )
            if result.valid and world.has_wire(from_instance, from_pin, to_instance, to_pin):
                result.fail("Connection already exists")
            outcome['result'] = result
            if not result.valid:
                return world
            wire = Wire(
                id=self._new_wire_id(world.wires),
                from_instance=from_instance,
                from_pin=from_pin,
                to_instance=to_instance,
                to_pin=to_pin,
                role=result.role.value,
                valid=True,
            )
            outcome['wire'] = wire
            return world.with_wires(world.wires + (wire,))

        self.store.update(apply)
        result = outcome['result']
        if result.valid:
            self.log.info('System', f"{result.role.value} connection added ({outcome['wire'].id})")
        else:
            self.log.warning('System', "Connection rejected: " + "; ".join(result.errors))
        return result

    def remove_wire(self, wire_id):
        def apply(world):
            return world.with_wires(w for w in world.wires if w.id != wire_id)
        self.store.update(apply)

    # ========== SIMULATION ==========

    def evaluate(self):
        world = self.world
        return evaluate_system(world.components, world.wires)

    def set_running(self, running):
        if running:
            self.scheduler.start()
        else:
            self.scheduler.stop()

    def set_speed(self, speed):
        """Clamp to the supported range and store; returns the applied speed."""
        speed = clamp_speed(speed)
        self.store.update(lambda w: replace(w, clock=replace(w.clock, speed=speed)))
        return speed

    def set_code(self, code):
        """New code is not deployed until deploy_code() is called again."""
        self.store.update(lambda w: replace(w, code=code, code_deployed=False))

    def deploy_code(self):
        """Mark the code deployed and log what it does against the current readings."""
        world = self.store.update(lambda w: replace(w, code_deployed=True))
        self.log.info('micro:bit', "Code deployed")
        power = evaluate_system(world.components, world.wires).power_status
        result = simulate_execution(world.code, sensor_readings(world.components, power))
        for action in result.actions:
            self.log.info('micro:bit', action)
        return result

    def set_auto_fluctuation(self, enabled):
        """Turn automatic sensor drift on or off; the running schedule is kept."""
        enabled = bool(enabled)
        self.store.update(lambda w: replace(w, clock=replace(w.clock, auto_fluctuation=enabled)))
        self.log.info('System', f"Auto fluctuation {'on' if enabled else 'off'}")
        return enabled

    def set_server_running(self, running):
        self.store.update(lambda w: replace(w, server=replace(w.server, running=bool(running))))
        self.log.info('Flask', "Server started" if running else "Server stopped")

    def update_router(self, **fields):
        self.store.update(lambda w: replace(w, router=replace(w.router, **fields)))

    def query_database(self):
        """Rows the browser client would see from GET /query."""
        world = self.world
        result = dispatch(HttpRequest('GET', '/query'), world.server, world.database)
        return result.response

    # ========== SCENARIOS ==========

    def load_scenario(self, scenario_id):
        world = load_scenario(scenario_id)
        if world is None:
            raise SandboxError(f"Unknown scenario: {scenario_id}")
        self.scheduler.stop()
        clock = self.world.clock
        self.store.replace(replace(world, clock=SimulationClockState(
            speed=clock.speed, auto_fluctuation=clock.auto_fluctuation,
        )))
        self.log.info('System', f"Scenario loaded: {SCENARIOS[scenario_id][0]}")

    def reset(self):
        self.scheduler.stop()
        self.store.replace(self._initial_world())
        self.log.clear()

    # ========== STATUS ==========

    def status(self):
        world = self.world
        report = evaluate_system(world.components, world.wires)
        components = []
        for comp in world.components:
            item = comp.as_dict()
            item['state']['powered'] = report.power_status.get(comp.instance_id, False)
            components.append(item)
        return {
            'state': self.scheduler.get_state(),
            'running': world.clock.running,
            'speed': world.clock.speed,
            'auto_fluctuation': world.clock.auto_fluctuation,
            'code_deployed': world.code_deployed,
            'server': world.server.as_dict(),
            'router': world.router.as_dict(),
            'components': components,
            'wires': [w.as_dict() for w in world.wires],
            'power_status': report.power_status,
            'issues': report.issues,
            'warnings': report.warnings,
        }

    def show_status(self):
        status = self.status()
        print("\n" + "=" * 50)
        print(f"  SIMULATION: {status['state']}  (x{status['speed']})")
        print(f"  Code deployed: {'yes' if status['code_deployed'] else 'no'}   "
              f"Server: {'running' if status['server']['running'] else 'stopped'}   "
              f"SSID: {status['router']['ssid'] or '-'}")
        print("=" * 50)
        for comp in status['components']:
            power = "ON " if comp['state']['powered'] else "OFF"
            value = comp['state']['value']
            reading = f"  = {value}" if value is not None else ""
            print(f"  [{power}] {comp['instance_id']} ({comp['definition_id']}){reading}")
        for wire in status['wires']:
            print(f"  {wire['id']}: {wire['from_instance']}.{wire['from_pin']} -> "
                  f"{wire['to_instance']}.{wire['to_pin']} ({wire['role']})")
        for issue in status['issues']:
            print(f"  [ISSUE] {issue}")
        for warning in status['warnings']:
            print(f"  [WARN] {warning}")
        print("=" * 50)

    # ========== COMMANDS ==========

    def handle_command(self, cmd):
        """
        Run a console command. Returns True when handled, None when unknown.
        SandboxError propagates to the caller's command loop.
        """
        parts = cmd.split()
        if not parts:
            return None
        op, args = parts[0], parts[1:]

        if op == 'l':
            for category in Category.ALL:
                print(f"  {category.upper()}")
                for definition in by_category(category):
                    print(f"    {definition.id:<22} {definition.name}")
        elif op == 'a' and args:
            position = (int(args[1]), int(args[2])) if len(args) >= 3 else (0, 0)
            instance_id = self.place_component(args[0], position)
            print(f"[SANDBOX] Placed {instance_id}")
        elif op == 'r' and args:
            self.remove_component(args[0])
            print(f"[SANDBOX] Removed {args[0]}")
        elif op == 'w' and len(args) == 2:
            (a_inst, a_pin), (b_inst, b_pin) = (_split_endpoint(a) for a in args)
            result = self.request_wire(a_inst, a_pin, b_inst, b_pin)
            state = "OK" if result.valid else "REJECTED"
            print(f"[WIRE] {state} ({result.role.value})")
            for error in result.errors:
                print(f"  [ERROR] {error}")
            for warning in result.warnings:
                print(f"  [WARN] {warning}")
        elif op == 'u' and args:
            self.remove_wire(args[0])
        elif op == 'd':
            self.deploy_code()
        elif op == 'v':
            self.set_server_running(not self.world.server.running)
        elif op == 'g':
            try:
                self.set_running(True)
            except SimulationNotReady as exc:
                print("[SIM] Cannot start:")
                for issue in exc.issues:
                    print(f"  - {issue}")
        elif op == 'x':
            self.set_running(False)
        elif op == '+':
            print(f"[SIM] Speed x{self.set_speed(self.world.clock.speed + SPEED_STEP)}")
        elif op == '-':
            print(f"[SIM] Speed x{self.set_speed(self.world.clock.speed - SPEED_STEP)}")
        elif op == 'f':
            enabled = self.set_auto_fluctuation(not self.world.clock.auto_fluctuation)
            print(f"[SIM] Auto fluctuation {'ON' if enabled else 'OFF'}")
        elif op == 'c' and args:
            self.load_scenario(args[0])
        elif op == 'q':
            for row in self.query_database().body:
                print(f"  #{row['id']}  {row['value']}  {row['timestamp']}")
        elif op == 'log':
            for entry in self.log.entries():
                print(f"  {entry.level:<7} [{entry.source}] {entry.message}")
        else:
            return None
        return True

    # ========== LIFECYCLE ==========

    def cleanup(self):
        self.scheduler.stop()


def _split_endpoint(text):
    instance_id, sep, pin_id = text.rpartition('.')
    if not sep:
        raise SandboxError(f"Expected <instance>.<pin>, got {text}")
    return instance_id, pin_id
