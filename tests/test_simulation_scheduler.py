from __future__ import annotations

import unittest
from dataclasses import replace

from iot_sandbox.controllers import SimulationScheduler
from iot_sandbox.errors import SimulationNotReady
from iot_sandbox.event_log import ERROR, WARNING, EventLog
from iot_sandbox.models import Route, World
from iot_sandbox.scenarios import classroom_temperature
from iot_sandbox.simulators import ManualTimerSource, SensorFluctuator, ThreadingTimerSource
from iot_sandbox.world import WorldStore


class RecordingTimerSource(ManualTimerSource):
    def __init__(self):
        super().__init__()
        self.callbacks = []

    def schedule(self, delay_ms, callback):
        self.callbacks.append(callback)
        return super().schedule(delay_ms, callback)


class FixedRandom:
    def __init__(self, delta):
        self.delta = delta

    def uniform(self, a, b):
        return max(a, min(b, self.delta))


def ready_world(speed=1.0, server_running=True):
    world = classroom_temperature()
    return replace(
        world,
        code_deployed=True,
        server=replace(world.server, running=server_running),
        clock=replace(world.clock, speed=speed),
    )


def sensor_value(world):
    return world.get_component("temp-sensor-1").state.value


def sensorlog(world):
    return world.database.rows("sensorlog")


class TestSimulationScheduler(unittest.TestCase):
    def setUp(self) -> None:
        self.timers = RecordingTimerSource()
        self.log = EventLog()
        self.store = WorldStore(ready_world())
        self.scheduler = SimulationScheduler(
            self.store, self.log,
            timer_source=self.timers,
            fluctuator=SensorFluctuator(FixedRandom(1.0)),
            clock=lambda: 1000.0,
        )

    def tearDown(self) -> None:
        self.scheduler.stop()

    def messages(self, level=None):
        return [e.message for e in self.log.entries() if level is None or e.level == level]

    def test_start_rejected_with_issues(self) -> None:
        self.store.replace(World())
        with self.assertRaises(SimulationNotReady) as ctx:
            self.scheduler.start()
        self.assertIn("A micro:bit mainboard is required", ctx.exception.issues)
        self.assertIn("Code must be deployed to the micro:bit first", ctx.exception.issues)
        self.assertEqual(self.scheduler.get_state(), SimulationScheduler.STOPPED)
        self.assertEqual(self.timers.pending(), 0)
        self.assertFalse(self.store.read().clock.running)

    def test_start_rejected_when_wiring_incomplete(self) -> None:
        self.store.update(lambda w: w.with_wires(x for x in w.wires if x.id != "conn-3"))
        with self.assertRaises(SimulationNotReady) as ctx:
            self.scheduler.start()
        self.assertEqual(ctx.exception.issues, ["Temperature/humidity sensor missing ground"])

    def test_start_arms_both_activities(self) -> None:
        self.scheduler.start()
        self.assertTrue(self.scheduler.is_running)
        self.assertTrue(self.store.read().clock.running)
        self.assertEqual(self.timers.pending(), 2)
        self.assertIn("Simulation started (x1.0)", self.messages())

    def test_start_twice_is_noop(self) -> None:
        self.scheduler.start()
        self.scheduler.start()
        self.assertEqual(self.timers.pending(), 2)

    def test_fluctuation_updates_powered_sensor(self) -> None:
        self.scheduler.start()
        self.timers.advance(2000)
        world = self.store.read()
        self.assertEqual(sensor_value(world), 26.0)
        self.assertEqual(world.clock.last_tick, 1000.0)
        self.assertEqual(sensorlog(world), ())

    def test_dispatch_uploads_current_reading(self) -> None:
        self.scheduler.start()
        self.timers.advance(3000)
        rows = sensorlog(self.store.read())
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["value"], 26.0)
        self.assertEqual(rows[0]["id"], 1)
        self.assertIn("Database updated: sensorlog +1 record", self.messages())
        self.assertIn("Response: 200 OK - Temperature 26.0°C recorded (ID: 1)", self.messages())

    def test_speed_shortens_periods(self) -> None:
        self.store.replace(ready_world(speed=2.0))
        self.scheduler.start()
        self.timers.advance(1000)
        self.assertEqual(sensor_value(self.store.read()), 26.0)
        self.assertEqual(sensorlog(self.store.read()), ())
        self.timers.advance(500)
        self.assertEqual(len(sensorlog(self.store.read())), 1)

    def test_speed_change_applies_on_next_rearm(self) -> None:
        self.scheduler.start()
        self.timers.advance(2000)
        self.store.update(lambda w: replace(w, clock=replace(w.clock, speed=2.0)))
        # next fluctuation was armed at speed 1.0 for t=4000, following one at 4000 + 1000
        self.timers.advance(2000)
        self.assertEqual(sensor_value(self.store.read()), 27.0)
        self.timers.advance(1000)
        self.assertEqual(sensor_value(self.store.read()), 28.0)

    def test_stopped_server_skips_upload_and_warns_once(self) -> None:
        self.store.replace(ready_world(server_running=False))
        self.scheduler.start()
        self.timers.advance(9000)
        self.assertEqual(sensorlog(self.store.read()), ())
        warnings = [m for m in self.messages(WARNING) if "Flask server is not running" in m]
        self.assertEqual(len(warnings), 1)

    def test_unreachable_network_skips_upload(self) -> None:
        self.scheduler.start()
        self.store.update(lambda w: replace(w, router=replace(w.router, ssid="")))
        self.timers.advance(3000)
        self.assertEqual(sensorlog(self.store.read()), ())
        self.assertIn("IoT module cannot reach the network, upload skipped", self.messages(WARNING))

    def test_unpowered_sensor_is_not_read(self) -> None:
        self.scheduler.start()
        self.store.update(lambda w: w.with_wires(x for x in w.wires if x.id != "conn-2"))
        self.timers.advance(3000)
        world = self.store.read()
        self.assertEqual(sensor_value(world), 25)
        self.assertEqual(sensorlog(world), ())
        self.assertIn(
            "Temperature/humidity sensor is unpowered, cannot read data",
            self.messages(WARNING),
        )

    def test_failed_request_is_logged_and_scheduler_keeps_running(self) -> None:
        self.store.update(lambda w: replace(
            w, server=replace(w.server, routes=(Route("/query", "GET", "query_data"),))
        ))
        self.scheduler.start()
        self.timers.advance(3000)
        self.assertIn("Request failed: 404 - Not Found", self.messages(ERROR))
        self.assertTrue(self.scheduler.is_running)
        self.assertEqual(self.timers.pending(), 2)

    def test_no_ticks_after_stop(self) -> None:
        self.scheduler.start()
        self.timers.advance(3000)
        self.scheduler.stop()
        self.assertEqual(self.timers.pending(), 0)
        self.assertFalse(self.store.read().clock.running)

        before = self.store.read()
        entries = len(self.log)
        self.timers.advance(60000)
        self.assertIs(self.store.read(), before)
        self.assertEqual(len(self.log), entries)

    def test_stop_is_idempotent(self) -> None:
        self.scheduler.start()
        self.scheduler.stop()
        world = self.store.read()
        entries = len(self.log)
        self.scheduler.stop()
        self.assertIs(self.store.read(), world)
        self.assertEqual(len(self.log), entries)
        self.assertEqual(self.messages().count("Simulation stopped"), 1)

    def test_stop_before_start_is_noop(self) -> None:
        world = self.store.read()
        self.scheduler.stop()
        self.assertIs(self.store.read(), world)
        self.assertEqual(len(self.log), 0)

    def test_callback_from_previous_run_is_ignored(self) -> None:
        self.scheduler.start()
        first_fluctuation = self.timers.callbacks[0]
        first_dispatch = self.timers.callbacks[1]
        self.scheduler.stop()
        self.scheduler.start()

        # a timer thread that fired before stop() gets the lock only now
        first_fluctuation()
        first_dispatch()
        self.assertEqual(self.timers.pending(), 2)
        self.assertEqual(sensor_value(self.store.read()), 25)
        self.assertEqual(sensorlog(self.store.read()), ())

        self.timers.advance(2000)
        self.assertEqual(sensor_value(self.store.read()), 26.0)

    def test_auto_fluctuation_off_keeps_readings(self) -> None:
        self.store.update(lambda w: replace(w, clock=replace(w.clock, auto_fluctuation=False)))
        self.scheduler.start()
        self.timers.advance(3000)
        world = self.store.read()
        self.assertEqual(sensor_value(world), 25)
        self.assertEqual([r["value"] for r in sensorlog(world)], [25.0])
        self.assertEqual(self.timers.pending(), 2)

        self.store.update(lambda w: replace(w, clock=replace(w.clock, auto_fluctuation=True)))
        self.timers.advance(1000)
        self.assertEqual(sensor_value(self.store.read()), 26.0)

    def test_microbit_display_follows_deployed_code(self) -> None:
        self.scheduler.start()
        self.timers.advance(3000)
        microbit = self.store.read().get_component("microbit-1")
        self.assertEqual(microbit.state.value, 26.0)

    def test_restart_after_stop(self) -> None:
        self.scheduler.start()
        self.scheduler.stop()
        self.scheduler.start()
        self.timers.advance(3000)
        self.assertEqual(len(sensorlog(self.store.read())), 1)


class TestTimerSources(unittest.TestCase):
    def test_manual_source_fires_in_due_order(self) -> None:
        timers = ManualTimerSource()
        fired = []
        timers.schedule(300, lambda: fired.append(("b", timers.now_ms)))
        timers.schedule(100, lambda: fired.append(("a", timers.now_ms)))
        cancelled = timers.schedule(200, lambda: fired.append(("x", timers.now_ms)))
        cancelled.cancel()
        timers.advance(250)
        self.assertEqual(fired, [("a", 100)])
        timers.advance(50)
        self.assertEqual(fired, [("a", 100), ("b", 300)])
        self.assertEqual(timers.now_ms, 300)
        self.assertEqual(timers.pending(), 0)

    def test_threading_source_returns_cancellable_daemon(self) -> None:
        timer = ThreadingTimerSource().schedule(60000, lambda: None)
        try:
            self.assertTrue(timer.daemon)
        finally:
            timer.cancel()


if __name__ == "__main__":
    unittest.main()
