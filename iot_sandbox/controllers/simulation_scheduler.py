"""
Simulation scheduler for the sandbox.

States:
  STOPPED  - initial state; no timers armed
  RUNNING  - fluctuation and dispatch activities re-arm themselves

Transitions:
  STOPPED + start() with no readiness issues -> RUNNING
  STOPPED + start() with readiness issues    -> STOPPED (SimulationNotReady)
  RUNNING + start()                          -> RUNNING (no-op)
  RUNNING + stop()                           -> STOPPED (both timers cancelled)
  STOPPED + stop()                           -> STOPPED (no-op)

Activities while RUNNING (period = base / speed, read at every re-arm):
  fluctuation (2000 ms) - powered sensors get a new reading, unless
                          clock.auto_fluctuation is off
  dispatch    (3000 ms) - the micro:bit display follows the deployed code,
                          then powered sensors upload their reading to the
                          simulated server, if it is running and reachable

Every armed callback carries the generation it was armed in. start() and
stop() bump the generation, so a callback from an earlier run does nothing.
"""

import threading
import time
from dataclasses import replace
from functools import partial

from iot_sandbox.circuit import evaluate_system, network_reachable
from iot_sandbox.components import Category, SENSOR_PROFILES, get_definition
from iot_sandbox.components.mainboards import MICROCONTROLLER_IDS
from iot_sandbox.components.sensors import default_reading
from iot_sandbox.errors import SimulationNotReady
from iot_sandbox.simulators import (
    HttpRequest,
    SensorFluctuator,
    ThreadingTimerSource,
    dispatch,
    sensor_readings,
    simulate_execution,
)


def _sensors(world):
    for comp in world.components:
        definition = get_definition(comp.definition_id)
        if definition is not None and definition.category == Category.SENSOR:
            yield comp, definition


class SimulationScheduler:
    """
    Drives the running simulation against a WorldStore.

    Parameters:
        store                 (WorldStore)  - authoritative world; read and replaced, never copied
        event_log             (EventLog)    - receives info/data/warning/error entries
        timer_source          (object)      - schedule(delay_ms, callback) -> handle.cancel()
        fluctuator            (SensorFluctuator)
        clock                 (callable)    - wall clock used for last_tick
        fluctuation_period_ms (float)       - base period at speed 1.0
        dispatch_period_ms    (float)       - base period at speed 1.0
    """

    STOPPED = 'STOPPED'
    RUNNING = 'RUNNING'

    FLUCTUATION_PERIOD_MS = 2000
    DISPATCH_PERIOD_MS = 3000

    def __init__(self, store, event_log, timer_source=None, fluctuator=None,
                 clock=time.time, fluctuation_period_ms=None, dispatch_period_ms=None):
        self._store = store
        self._log = event_log
        self._timers = timer_source or ThreadingTimerSource()
        self._fluctuator = fluctuator or SensorFluctuator()
        self._clock = clock
        self.fluctuation_period_ms = fluctuation_period_ms or self.FLUCTUATION_PERIOD_MS
        self.dispatch_period_ms = dispatch_period_ms or self.DISPATCH_PERIOD_MS

        self._state = self.STOPPED
        self._lock = threading.RLock()
        self._fluctuation_timer = None
        self._dispatch_timer = None
        self._generation = 0          # bumped on start/stop; stale callbacks carry an old one
        self._upload_blocked = None   # last reason uploads were skipped

    # ========== PUBLIC API ==========

    def get_state(self):
        with self._lock:
            return self._state

    @property
    def is_running(self):
        return self.get_state() == self.RUNNING

    def readiness_issues(self):
        """Everything that currently blocks start(); empty when ready."""
        world = self._store.read()
        issues = []
        if not any(c.definition_id in MICROCONTROLLER_IDS for c in world.components):
            issues.append("A micro:bit mainboard is required")
        if not world.code_deployed:
            issues.append("Code must be deployed to the micro:bit first")
        issues.extend(evaluate_system(world.components, world.wires).issues)
        return issues

    def start(self):
        with self._lock:
            if self._state == self.RUNNING:
                return
            issues = self.readiness_issues()
            if issues:
                raise SimulationNotReady(issues)

            self._state = self.RUNNING
            self._generation += 1
            self._upload_blocked = None
            world = self._store.update(
                lambda w: replace(w, clock=replace(w.clock, running=True))
            )
            self._log.info('System', f"Simulation started (x{world.clock.speed})")
            self._fluctuation_timer = self._arm(self.fluctuation_period_ms, self._fluctuation_tick)
            self._dispatch_timer = self._arm(self.dispatch_period_ms, self._dispatch_tick)

    def stop(self):
        with self._lock:
            self._cancel_timers_locked()
            was_running = self._state == self.RUNNING
            self._state = self.STOPPED
            self._generation += 1
            if self._store.read().clock.running:
                self._store.update(lambda w: replace(w, clock=replace(w.clock, running=False)))
            if was_running:
                self._log.info('System', "Simulation stopped")

    # ========== TIMERS ==========

    def _arm(self, base_period_ms, tick):
        speed = self._store.read().clock.speed or 1.0
        return self._timers.schedule(base_period_ms / speed, partial(tick, self._generation))

    def _is_current(self, generation):
        # a Timer thread that fired before cancel() may still be waiting on the lock
        return self._state == self.RUNNING and generation == self._generation

    def _cancel_timers_locked(self):
        if self._fluctuation_timer is not None:
            self._fluctuation_timer.cancel()
            self._fluctuation_timer = None
        if self._dispatch_timer is not None:
            self._dispatch_timer.cancel()
            self._dispatch_timer = None

    # ========== FLUCTUATION ACTIVITY ==========

    def _fluctuation_tick(self, generation):
        with self._lock:
            if not self._is_current(generation):
                return
            if self._store.read().clock.auto_fluctuation:
                self._store.update(self._fluctuate_world)
            self._fluctuation_timer = self._arm(self.fluctuation_period_ms, self._fluctuation_tick)

    def _fluctuate_world(self, world):
        power = evaluate_system(world.components, world.wires).power_status
        components = []
        for comp in world.components:
            definition = get_definition(comp.definition_id)
            if (definition is not None and definition.category == Category.SENSOR
                    and power.get(comp.instance_id)):
                comp = comp.with_value(
                    self._fluctuator.next_value(comp.state.value, comp.definition_id)
                )
            components.append(comp)
        world = world.with_components(components)
        return replace(world, clock=replace(world.clock, last_tick=self._clock()))

    # ========== DISPATCH ACTIVITY ==========

    def _dispatch_tick(self, generation):
        with self._lock:
            if not self._is_current(generation):
                return
            try:
                self._store.update(self._run_deployed_code)
                self._upload_readings()
            except Exception as exc:
                self._log.error('System', f"Dispatch tick failed: {exc}")
            self._dispatch_timer = self._arm(self.dispatch_period_ms, self._dispatch_tick)

    def _run_deployed_code(self, world):
        """The micro:bit shows whatever its deployed code displays for the current readings."""
        if not world.code_deployed:
            return world
        power = evaluate_system(world.components, world.wires).power_status
        result = simulate_execution(world.code, sensor_readings(world.components, power))
        if result.display_value is None:
            return world
        return world.with_components(
            c.with_value(result.display_value) if c.definition_id in MICROCONTROLLER_IDS else c
            for c in world.components
        )

    def _upload_blocked_reason(self, world, report):
        if not world.server.running:
            return "Flask server is not running, upload skipped"
        if not network_reachable(world.components, world.wires, world.router, report):
            return "IoT module cannot reach the network, upload skipped"
        return None

    def _upload_readings(self):
        world = self._store.read()
        report = evaluate_system(world.components, world.wires)

        reason = self._upload_blocked_reason(world, report)
        if reason != self._upload_blocked and reason is not None:
            self._log.warning('IoT module', reason)
        self._upload_blocked = reason
        if reason is not None:
            return

        server = world.server
        for sensor, definition in _sensors(world):
            if not report.power_status.get(sensor.instance_id):
                self._log.warning('micro:bit', f"{definition.name} is unpowered, cannot read data")
                continue

            value = sensor.state.value
            if value is None:
                value = default_reading(sensor.definition_id)
            profile = SENSOR_PROFILES.get(sensor.definition_id)
            unit = profile.unit if profile else ''
            self._log.data('micro:bit', f"Read {definition.name}: {value:.1f} {unit}".rstrip())

            path = f"/upload?temperature={value:.1f}"
            self._log.info('IoT module', f"Request: GET http://{server.ip}:{server.port}{path}")
            result = self._dispatch_into_world(HttpRequest('GET', path))

            response = result.response
            if response.status == 200:
                body = response.body
                self._log.info(
                    'Flask',
                    f"Response: 200 OK - {body.get('message', 'saved')} (ID: {body.get('id')})"
                )
                if result.updated_database is not None:
                    self._log.data('SQLite', "Database updated: sensorlog +1 record")
            else:
                error = response.body.get('error', 'unknown error') if isinstance(response.body, dict) else response.body
                self._log.error('Flask', f"Request failed: {response.status} - {error}")

    def _dispatch_into_world(self, request):
        """Dispatch against the current database and commit the result in one step."""
        outcome = {}

        def apply(world):
            result = dispatch(request, world.server, world.database)
            outcome['result'] = result
            if result.updated_database is None:
                return world
            return replace(world, database=result.updated_database)

        self._store.update(apply)
        return outcome['result']
